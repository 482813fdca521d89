"""Working out where the template comes from.

The template can be named in four ways, checked in this order:

1. ``--git URL``: a git repository; the positional argument, if any,
   is the subfolder.
2. ``--path DIR``: a local directory; same positional rule as ``--git``.
3. A favorite from the application config.
4. The positional argument itself: an existing local directory, a git
   URL, or an abbreviation such as ``gh:user/repo``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from stamper.errors import SourceError
from stamper.models.args import GenerateArgs, Vcs
from stamper.models.config import AppConfig

GIT_ABBREVIATIONS: dict[str, str] = {
    "gh:": "https://github.com/",
    "gl:": "https://gitlab.com/",
    "bb:": "https://bitbucket.org/",
}


def expand_abbreviation(url: str) -> str:
    """Expand a ``gh:``, ``gl:`` or ``bb:`` shorthand into a full URL.

    >>> expand_abbreviation("gh:rust-lang/hello")
    'https://github.com/rust-lang/hello.git'
    """
    for prefix, base in GIT_ABBREVIATIONS.items():
        if url.startswith(prefix):
            repo = url[len(prefix) :]
            if not repo.endswith(".git"):
                repo += ".git"
            return base + repo
    return url


@dataclass(frozen=True)
class GitLocation:
    url: str
    branch: str | None = None
    identity: Path | None = None


@dataclass(frozen=True)
class PathLocation:
    path: Path


TemplateLocation = Union[GitLocation, PathLocation]


@dataclass
class UserParsedInput:
    """The template location, subfolder and values chosen for one run.

    Attributes:
        location: Where to fetch the template from.
        subfolder: Path inside the template that holds the template.
        values: Pre-supplied values from the app config defaults and
            the favorite, lowest priority first.
        vcs: VCS requested by the favorite, if any.
    """

    location: TemplateLocation
    subfolder: str | None = None
    values: dict[str, Any] = field(default_factory=dict)
    vcs: Vcs | None = None

    @classmethod
    def from_args_and_config(cls, app_config: AppConfig, args: GenerateArgs) -> UserParsedInput:
        """Combine command-line arguments with the application config.

        Raises:
            SourceError: If no template was named at all.
        """
        values: dict[str, Any] = dict(app_config.defaults.values)

        if args.git is not None:
            return cls(
                location=GitLocation(expand_abbreviation(args.git), args.branch, args.ssh_identity),
                subfolder=args.template or args.subfolder,
                values=values,
            )
        if args.path is not None:
            return cls(
                location=PathLocation(Path(args.path)),
                subfolder=args.template or args.subfolder,
                values=values,
            )
        if args.template is None:
            raise SourceError(
                "No template given. Name a favorite, a git URL or a local path, "
                "or use --git / --path."
            )

        favorite = app_config.get_favorite(args.template)
        if favorite is not None:
            values.update(favorite.values)
            branch = args.branch or favorite.branch
            if favorite.path is not None:
                location: TemplateLocation = PathLocation(Path(favorite.path).expanduser())
            else:
                url = favorite.git if favorite.git is not None else args.template
                location = GitLocation(expand_abbreviation(url), branch, args.ssh_identity)
            return cls(
                location=location,
                subfolder=args.subfolder or favorite.subfolder,
                values=values,
                vcs=Vcs(favorite.vcs) if favorite.vcs else None,
            )

        candidate = Path(args.template).expanduser()
        if candidate.is_dir():
            location = PathLocation(candidate)
        else:
            url = expand_abbreviation(args.template)
            location = GitLocation(url, args.branch, args.ssh_identity)
        return cls(location=location, subfolder=args.subfolder, values=values)
