import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Supabase configuration
    # Get these from: Supabase Dashboard > Settings > API
    SUPABASE_URL = os.getenv('SUPABASE_URL')
    SUPABASE_KEY = os.getenv('SUPABASE_KEY')
    # Only needed for creating users from the admin area
    SUPABASE_SERVICE_ROLE_KEY = os.getenv('SUPABASE_SERVICE_ROLE_KEY')

    # JWT configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'your-secret-key-change-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    # CORS configuration
    CORS_HEADERS = 'Content-Type'

    # LLM configuration (any OpenAI-compatible endpoint, Groq by default)
    LLM_API_KEY = os.getenv('GROQ_API_KEY') or os.getenv('LLM_API_KEY')
    LLM_BASE_URL = os.getenv('LLM_BASE_URL', 'https://api.groq.com/openai/v1')
    LLM_MODEL = os.getenv('LLM_MODEL', 'meta-llama/llama-4-scout-17b-16e-instruct')

    # Public site, used for sitemap URLs
    SITE_URL = os.getenv('SITE_URL', 'https://lab.pnlmahdia.com')

    # Compensating delete after a failed project create
    ROLLBACK_RETRIES = int(os.getenv('ROLLBACK_RETRIES', '3'))
    ROLLBACK_BACKOFF = float(os.getenv('ROLLBACK_BACKOFF', '0.5'))

    TESTING = False

    @classmethod
    def validate(cls):
        if not cls.SUPABASE_URL:
            raise ValueError("SUPABASE_URL environment variable is required!")
        if not cls.SUPABASE_KEY:
            raise ValueError("SUPABASE_KEY environment variable is required!")


class TestConfig(Config):
    TESTING = True
    SITE_URL = 'https://lab.example'
    SUPABASE_URL = 'http://localhost:54321'
    SUPABASE_KEY = 'test-anon-key'
    JWT_SECRET_KEY = 'test-secret-key-with-enough-length-for-hs256'
    LLM_API_KEY = 'test-llm-key'
    ROLLBACK_BACKOFF = 0.0
