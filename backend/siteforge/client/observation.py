from dataclasses import dataclass
from typing import Union

from siteforge.domain.status import ProjectStatus


@dataclass(frozen=True)
class Local:
    """Status assumed after a user action, not yet seen on the server."""

    status: ProjectStatus


@dataclass(frozen=True)
class Confirmed:
    """Status read back from the server."""

    status: ProjectStatus


Observation = Union[Local, Confirmed]
