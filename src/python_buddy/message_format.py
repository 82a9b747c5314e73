import re
from typing import Dict, List

DisplayBlock = Dict[str, str]

CODE_FENCE = "```"
FENCED_REGION_PATTERN = re.compile(r"(```[^`]*```)")
LANGUAGE_TAG_PATTERN = re.compile(r"^([A-Za-z0-9_+#.-]+)[ \t]*\r?\n")
KNOWN_LANGUAGES = {
    "bash", "c", "cpp", "css", "html", "java", "javascript", "js", "json", "markdown",
    "md", "py", "python", "python3", "pycon", "shell", "sh", "sql", "text", "toml",
    "ts", "typescript", "xml", "yaml", "yml",
}


def format_message(text: str) -> List[DisplayBlock]:
    content = text or ""
    if CODE_FENCE not in content:
        return _paragraphs(content)

    blocks: List[DisplayBlock] = []
    for segment in FENCED_REGION_PATTERN.split(content):
        if not segment:
            continue
        if _is_fenced_region(segment):
            blocks.append(_code_block(segment[len(CODE_FENCE):-len(CODE_FENCE)]))
        else:
            blocks.extend(_paragraphs(segment))
    return blocks


def _is_fenced_region(segment: str) -> bool:
    return (
        len(segment) >= 2 * len(CODE_FENCE)
        and segment.startswith(CODE_FENCE)
        and segment.endswith(CODE_FENCE)
    )


def _paragraphs(segment: str) -> List[DisplayBlock]:
    return [{"kind": "paragraph", "text": line, "language": ""} for line in segment.split("\n")]


def _code_block(body: str) -> DisplayBlock:
    language = ""
    match = LANGUAGE_TAG_PATTERN.match(body)
    if match and match.group(1).lower() in KNOWN_LANGUAGES:
        language = match.group(1).lower()
        body = body[match.end():]
    return {"kind": "code", "text": body, "language": language}
