"""Prompt Builder - Construct the commit message prompt from processed changes."""

from dataclasses import dataclass

from pushscript import COMMIT_TYPES
from pushscript.git import ProcessedDiff

# (min_files, bullet_range): bigger changes get more bullets
BULLET_THRESHOLDS = {
    "detailed": [(15, "6-8"), (8, "5-6"), (4, "4-5"), (0, "2-3")],
    "default": [(15, "5-6"), (8, "4-5"), (4, "3-4"), (0, "1-2")],
}

_SUBJECT_SIMPLE = "[subject: imperative verb + what changed]"
_SUBJECT_TYPED = "type(scope): [imperative verb + what changed]"

_BULLETS = {
    "simple": "- [bullet: specific detail from the diff]\n- [bullet: another detail if needed]",
    "conventional": "- [bullet: specific detail from the diff]\n- [bullet: why or impact if relevant]",
    "detailed": (
        "- [bullet: specific implementation detail]\n"
        "- [bullet: why this approach was chosen]\n"
        "- [bullet: what problem this solves]"
    ),
}


@dataclass
class PromptConfig:
    """User-provided context that shapes the prompt."""
    hint: str | None = None
    forced_type: str | None = None
    file_count: int = 0
    style: str = "conventional"
    include_body: bool = True
    max_subject_length: int = 72


class PromptBuilder:
    """Builds the single-message commit prompt, one section at a time."""

    def build(self, diff: ProcessedDiff, config: PromptConfig | None = None) -> str:
        config = config or PromptConfig(file_count=diff.total_files)
        sections = [
            self._role_section(),
            self._format_section(config),
            self._example_section(config),
            self._changes_section(diff),
            self._hint_section(config),
            self._instructions_section(config),
        ]
        return "\n\n".join(filter(None, sections))

    def _role_section(self) -> str:
        return """You write git commit messages that document changes for future developers.

- The DIFF shows WHAT changed. Explain WHY.
- Identify the PRIMARY purpose; if the commit does several things, lead with the most significant one.
- The subject completes: "If applied, this commit will..."
- Avoid vague verbs ("Update", "Change", "Modify"); prefer "Add", "Remove", "Replace", "Extract".
- Scope is ONE word naming the module or feature (auth, api, cli), never a file path."""

    def _format_section(self, config: PromptConfig) -> str:
        max_len = config.max_subject_length
        if config.style == "simple":
            format_desc = f"subject line (imperative mood, max {max_len} chars)"
            type_instruction = "Use a plain subject line without a type prefix."
        else:
            format_desc = f"type(scope): subject line (lowercase, imperative mood, max {max_len} chars)"
            type_instruction = self._type_instruction(config.forced_type)

        if config.include_body or config.style == "detailed":
            bullets = self._bullet_range(config)
            body = f"Then a blank line and {bullets} bullet points ({config.file_count} files changed)."
        else:
            body = "Do NOT include a body or bullet points. Subject line only."

        return f"""<format>
{format_desc}

{body}

{type_instruction}
</format>"""

    def _type_instruction(self, forced_type: str | None) -> str:
        if forced_type:
            return f"IMPORTANT: Use type '{forced_type}' for this commit."
        types_list = "\n".join(f"  - {t}: {desc}" for t, desc in COMMIT_TYPES.items())
        return f"Choose the most appropriate type:\n{types_list}"

    def _bullet_range(self, config: PromptConfig) -> str:
        thresholds = BULLET_THRESHOLDS["detailed" if config.style == "detailed" else "default"]
        for min_files, bullet_range in thresholds:
            if config.file_count >= min_files:
                return bullet_range
        return thresholds[-1][1]

    def _example_section(self, config: PromptConfig) -> str:
        example = _SUBJECT_SIMPLE if config.style == "simple" else _SUBJECT_TYPED
        if config.include_body or config.style == "detailed":
            example += "\n\n" + _BULLETS.get(config.style, _BULLETS["conventional"])
        return f"""<format-example>
This shows FORMAT only. Never reuse its words; describe the actual diff below.

{example}
</format-example>"""

    def _changes_section(self, diff: ProcessedDiff) -> str:
        parts = ["<changes>", f"FILES CHANGED: {diff.total_files}", "", diff.summary]
        if diff.detailed_diff:
            parts.extend(["", "DIFF DETAILS:", diff.detailed_diff])
        if diff.truncated:
            parts.append("\n[Note: Diff was truncated due to size. Use the file summary for scope.]")
        parts.append("</changes>")
        return "\n".join(parts)

    def _hint_section(self, config: PromptConfig) -> str:
        if not config.hint:
            return ""
        return f"""<context>
The developer described the change as:
"{config.hint}"

Use this to inform your message, but verify it matches the diff.
</context>"""

    def _instructions_section(self, config: PromptConfig) -> str:
        first_line = "subject" if config.style == "simple" else "type(scope): subject"
        return f"""<instructions>
Output exactly ONE commit message, starting directly with the {first_line} line.
No markdown, no code fences, no preamble, no explanation after the message.
</instructions>"""
