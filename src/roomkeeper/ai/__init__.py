"""
Text completion for AI chat replies.

- **completion_client.py**: AsyncOpenAI wrapper against an OpenAI-compatible
  endpoint (OpenRouter by default); failures fold into a fallback reply.
"""
