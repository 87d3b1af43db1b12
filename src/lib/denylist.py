"""
Denylist loader

The built-in denylist lives in models.directives.DENYLIST. Deployments can
add rows of their own in a YAML file, named by the TEXGUARD_DENYLIST_FILE
setting. Extra rows are checked ahead of the built-in ones.

File layout:

    denylist:
      - name: '\\special'
        nargs: 1
      - name: '\\usepackage'
        nargs: 1
        optional_pos: 0
        action: apply
        display: '\\mbox{no packages}'
      - name: '\\let'
        nargs: 2
        format: [alpha, alpha]

Every row is validated when the file is loaded; any problem raises
DenylistError.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..config.settings import appsettings
from ..models.directives import (
    ArgFormat,
    DenyAction,
    DirectiveSpec,
    DENYLIST,
    argformat_decode,
)
from .defang import defang
from .parser import Parser
from .log import LOG


class DenylistError(Exception):
    """Raised when a denylist file cannot be loaded or validated"""
    pass


class DenylistEntry(BaseModel):
    """One denylist row as written in YAML"""

    name: str = Field(min_length=1)
    nargs: int = Field(default=0, ge=-9, le=9)
    optional_pos: Optional[int] = Field(default=None, ge=0)
    format: Union[int, List[str]] = Field(default=0)
    action: DenyAction = DenyAction.APPLY
    display: Optional[str] = None
    description: str = ""

    @field_validator("format")
    @classmethod
    def format_check(cls, value: Union[int, List[str]]) -> Union[int, List[str]]:
        if isinstance(value, list):
            for item in value:
                if item.upper() not in ArgFormat.__members__:
                    raise ValueError(f"unknown argument format '{item}'")
        elif value < 0:
            raise ValueError("format code must not be negative")
        return value

    @model_validator(mode="after")
    def notice_check(self) -> "DenylistEntry":
        """A row must not match the replacement it leaves behind"""
        if self.action == DenyAction.IGNORE:
            return self
        notice = self.display
        if notice is None:
            notice = "\\mbox{~\\underline{" + defang(self.name) + "~not~permitted}~}"
        if Parser(notice).directive_find(self.name) is not None:
            raise ValueError(f"'{self.name}' occurs in its own replacement text")
        return self

    def spec_make(self) -> DirectiveSpec:
        """Convert to the DirectiveSpec used by the validator"""
        if isinstance(self.format, list):
            formats: Tuple[ArgFormat, ...] = tuple(ArgFormat[item.upper()] for item in self.format)
        else:
            formats = argformat_decode(self.format, self.nargs)
        return DirectiveSpec(
            name=self.name,
            nargs=self.nargs,
            optional_pos=self.optional_pos,
            arg_formats=formats,
            action=self.action,
            display=self.display,
            description=self.description,
        )


def denylist_load(path: Union[str, Path]) -> Tuple[DirectiveSpec, ...]:
    """
    Load and validate extra denylist rows from a YAML file.

    Args:
        path: YAML file with a top-level "denylist" list

    Returns:
        Tuple of DirectiveSpec rows, in file order

    Raises:
        DenylistError: If the file is missing, unparsable or has a bad row
    """
    path = Path(path)
    if not path.exists():
        raise DenylistError(f"Denylist file not found: {path}")

    try:
        with open(path, 'r', encoding="utf-8") as f:
            config: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DenylistError(f"Failed to parse {path.name}: {e}")

    if config is None:
        return ()
    if not isinstance(config, dict) or not isinstance(config.get("denylist", []), list):
        raise DenylistError(f"{path.name}: expected a top-level 'denylist' list")

    rows: List[DirectiveSpec] = []
    for index, raw in enumerate(config.get("denylist") or []):
        try:
            rows.append(DenylistEntry.model_validate(raw).spec_make())
        except (ValidationError, ValueError) as e:
            raise DenylistError(f"{path.name}: row {index + 1} is invalid: {e}")

    LOG(f"Loaded {len(rows)} extra denylist row(s) from {path}", level=2)
    return tuple(rows)


@lru_cache(maxsize=8)
def _denylist_build(path: Optional[str]) -> Tuple[DirectiveSpec, ...]:
    extra = denylist_load(path) if path else ()
    return extra + DENYLIST


def denylist_default() -> Tuple[DirectiveSpec, ...]:
    """Configured extra rows followed by the built-in denylist"""
    return _denylist_build(appsettings.denylist_file)
