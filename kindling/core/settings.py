#!/usr/bin/env python3
"""
settings.py
-------------------
App-wide settings stored outside the database.

The settings file lives at `{app_data}/settings.json` and holds the
author's legal name and contact block used on SMF title pages. Every
field is optional; unknown keys are ignored so newer files load in
older versions.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

# --- Local imports ---
from .exceptions import ValidationError


@dataclass
class AppSettings:
    """
    Author and contact details applied to every project.

    Attributes:
        author_name: Legal name (title-page contact block)
        contact_address_line1: Street address
        contact_address_line2: City, country, postal code
        contact_phone: Phone number
        contact_email: Email address
    """

    author_name: Optional[str] = None
    contact_address_line1: Optional[str] = None
    contact_address_line2: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        """
        Build settings from a decoded JSON object.

        Unknown keys are dropped; non-string values are stringified and
        blank strings become None.
        """
        values: Dict[str, Optional[str]] = {}
        for name in cls.field_names():
            raw = data.get(name)
            if raw is None:
                continue
            text = str(raw).strip()
            values[name] = text or None
        return cls(**values)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)

    @classmethod
    def load(cls, path: Path) -> "AppSettings":
        """
        Load settings from disk.

        Args:
            path: Path to settings.json

        Returns:
            AppSettings (defaults when the file does not exist)

        Raises:
            ValidationError: If the file is not a JSON object
        """
        path = Path(path)
        if not path.exists():
            return cls()

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValidationError(f"Settings file is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError("Settings file is not a JSON object")

        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Write settings as pretty-printed JSON, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
