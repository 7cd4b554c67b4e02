"""
Provider drivers.

One ChatDriver implementation per backend (OpenAI, Azure OpenAI, Google
Gemini), selected through ``chat_driver_sdk.providers.factory``.
"""
