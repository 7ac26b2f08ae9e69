"""ArduinoLab backend: project gallery, comments and authoring API over Supabase."""

__version__ = '0.1.0'
