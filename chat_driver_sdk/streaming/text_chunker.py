import re
from typing import AsyncGenerator

_FRAGMENT = re.compile(r"\S+\s*|\s+")


async def iter_text_fragments(text: str) -> AsyncGenerator[str, None]:
    """Yield ``text`` as word-sized fragments that concatenate back to ``text``."""
    for match in _FRAGMENT.finditer(text):
        yield match.group(0)
