"""Code-language mapping between markdown fences and Notion code blocks."""

# =============================================================================
# Code Block Language Mapping
# =============================================================================
#
# Markdown: ```py
# Notion:   {"type": "code", "code": {"language": "python", ...}}
#
# Notion validates ``language`` against a closed list; anything outside it
# is rejected by the API, so unknown fence names fall back to "plain text".
# =============================================================================

NOTION_LANGUAGES: frozenset[str] = frozenset(
    {
        "abap", "arduino", "bash", "basic", "c", "clojure", "coffeescript",
        "c++", "c#", "css", "dart", "diff", "docker", "elixir", "elm",
        "erlang", "flow", "fortran", "f#", "gherkin", "glsl", "go",
        "graphql", "groovy", "haskell", "html", "java", "javascript",
        "json", "julia", "kotlin", "latex", "less", "lisp", "livescript",
        "lua", "makefile", "markdown", "markup", "matlab", "mermaid", "nix",
        "objective-c", "ocaml", "pascal", "perl", "php", "plain text",
        "powershell", "prolog", "protobuf", "python", "r", "reason", "ruby",
        "rust", "sass", "scala", "scheme", "scss", "shell", "sql", "swift",
        "typescript", "vb.net", "verilog", "vhdl", "visual basic",
        "webassembly", "xml", "yaml", "java/c/c++/c#",
    }
)

PLAIN_TEXT = "plain text"

# Fence aliases whose Notion name differs
_MARKDOWN_TO_NOTION_MAP: dict[str, str] = {
    "sh": "shell",
    "zsh": "shell",
    "console": "shell",
    "ps1": "powershell",
    "py": "python",
    "python3": "python",
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "cpp": "c++",
    "cxx": "c++",
    "cs": "c#",
    "csharp": "c#",
    "fsharp": "f#",
    "rb": "ruby",
    "rs": "rust",
    "kt": "kotlin",
    "yml": "yaml",
    "md": "markdown",
    "dockerfile": "docker",
    "tex": "latex",
    "objc": "objective-c",
    "proto": "protobuf",
    "text": PLAIN_TEXT,
    "txt": PLAIN_TEXT,
    "plaintext": PLAIN_TEXT,
    "plain": PLAIN_TEXT,
}


def markdown_to_notion_lang(info: str | None) -> str:
    """
    Convert a markdown fence info string to a Notion code language.

    Only the first word of the info string is used.

    Examples:
        >>> markdown_to_notion_lang("py")
        'python'
        >>> markdown_to_notion_lang("rust title=main.rs")
        'rust'
        >>> markdown_to_notion_lang("brainfuck")
        'plain text'
    """
    if not info or not info.strip():
        return PLAIN_TEXT
    lang = info.strip().split()[0].lower()
    lang = _MARKDOWN_TO_NOTION_MAP.get(lang, lang)
    if lang in NOTION_LANGUAGES:
        return lang
    return PLAIN_TEXT
