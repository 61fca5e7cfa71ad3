"""Chat relay for the Royal Medical Spa website assistant.

Keeps the Anthropic API key on the server: the browser posts the
conversation here and this service forwards it upstream.
"""

__version__ = "1.0.0"
