"""
Response parser for labeled model replies.

The model is asked to answer with ``LABEL: value`` sections. A section runs
from its marker to the next known marker or the end of the reply. Anything
missing falls back to a documented default instead of raising:

- numeric field missing or not a number -> 0
- feedback missing -> ``NO_FEEDBACK``
- list or mapping missing -> empty
"""

import re
from typing import Dict, Iterable, List, Optional

NO_FEEDBACK = "No feedback provided"

_NUMBER = re.compile(r"^[\[(*\s]*(\d+)")
_BULLET = re.compile(r"^[\-•*\s]+")


class ResponseParser:
    """Extracts labeled fields from free-text model output."""

    @staticmethod
    def _marker(label: str) -> "re.Pattern[str]":
        # CONTENT_ACCURACY must not satisfy a lookup for ACCURACY
        return re.compile(rf"(?<![A-Za-z_]){re.escape(label)}:[ \t]*")

    @classmethod
    def extract_sections(cls, text: str, labels: Iterable[str]) -> Dict[str, str]:
        """Map each label found in ``text`` to its trimmed section body."""
        text = text or ""
        found = []
        for label in labels:
            match = cls._marker(label).search(text)
            if match:
                found.append((match.start(), match.end(), label))
        found.sort()

        sections = {}
        for idx, (_, body_start, label) in enumerate(found):
            body_end = found[idx + 1][0] if idx + 1 < len(found) else len(text)
            sections[label] = text[body_start:body_end].strip()
        return sections

    @staticmethod
    def parse_int(value: Optional[str]) -> int:
        """Leading non-negative integer of ``value``; 0 when there is none."""
        if not value:
            return 0
        match = _NUMBER.match(value)
        return int(match.group(1)) if match else 0

    @staticmethod
    def parse_list(value: Optional[str]) -> List[str]:
        """Split a ``;``-delimited section into trimmed, non-empty items."""
        if not value:
            return []
        items = []
        for raw in value.split(";"):
            item = _BULLET.sub("", raw.strip()).strip()
            if item:
                items.append(item)
        return items

    @classmethod
    def parse_mapping(cls, value: Optional[str]) -> Dict[str, str]:
        """Parse ``Key: text; Key: text`` into a dict, splitting on the first colon."""
        mapping = {}
        for item in cls.parse_list(value):
            key, sep, text = item.partition(":")
            key, text = key.strip().strip("[]*"), text.strip()
            if sep and key and text:
                mapping[key] = text
        return mapping

    @classmethod
    def parse_scores(
        cls,
        text: str,
        score_labels: List[str],
        feedback_label: str = "FEEDBACK",
    ) -> Dict[str, object]:
        """
        Parse a grading reply.

        Returns a dict with one int per score label plus ``feedback``.
        """
        sections = cls.extract_sections(text, [*score_labels, feedback_label])
        result: Dict[str, object] = {
            label: cls.parse_int(sections.get(label)) for label in score_labels
        }
        result["feedback"] = sections.get(feedback_label) or NO_FEEDBACK
        return result
