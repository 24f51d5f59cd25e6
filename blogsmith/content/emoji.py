"""Strips emoji code points from documents rendered to HTML."""

import re

from .pipeline import Transform

# Misc Symbols and Pictographs through Symbols and Pictographs Extended-A,
# plus Misc Symbols and Dingbats.
EMOJI_RE = re.compile("[\U0001F300-\U0001FAFF\u2600-\u27BF]")


class RemoveEmojis(Transform):
    def apply(self, content: str, metadata: dict) -> str:
        if not content or metadata.get("output_ext", ".html") != ".html":
            return content
        return EMOJI_RE.sub("", content)
