"""Job description models.

A TranscodeJob is immutable once built. It travels through the broker as
JSON, e.g.::

    {"kind": "transcode", "prefix": "mr_robot_s01_ep03",
     "input_path": "/data/rips/mr_robot_s01_ep03.mkv",
     "output_path": "/home/user/dvdrip/encoded/mr_robot_s01_ep03.mp4"}
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class JobKind(str, Enum):
    """Kind of work a job describes."""

    TRANSCODE = "transcode"
    MOVE = "move"


class TranscodeJob(BaseModel):
    """A transcode or move request for a single file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: JobKind
    prefix: str
    input_path: Path
    output_path: Path

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Prefix names job scripts and logs, so it must be a bare name."""
        if not v or "/" in v or v in (".", ".."):
            raise ValueError(f"Invalid job prefix '{v}'")
        return v

    @field_validator("input_path", "output_path")
    @classmethod
    def validate_absolute(cls, v: Path) -> Path:
        if not v.is_absolute():
            raise ValueError(f"Job paths must be absolute, got '{v}'")
        return v

    def to_json(self) -> str:
        """Serialize for publishing."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, payload: str | bytes) -> TranscodeJob:
        """Deserialize a published job.

        Raises:
            pydantic.ValidationError: If the payload is not a valid job.
        """
        return cls.model_validate_json(payload)
