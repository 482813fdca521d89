"""The generation pipeline.

``generate`` fetches the template, resolves the project name and
directory and hands over to ``expand_template``, which drives the
expansion state machine::

    SLOTS_DECLARED -> CONDITIONALS_MERGED -> VARIABLES_RESOLVED
    -> FILTER_COMPUTED -> PRE_HOOKS_RUN -> TREE_EXPANDED
    -> POST_HOOKS_RUN -> CLEANED

Any stage may end in FAILED. The StamperError that caused it carries
the name of the stage it was raised in; later stages do not run and
output already written is left in place.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console

from stamper import __version__, interactive
from stamper.cli.output import (
    create_walk_progress,
    print_done,
    print_moving,
    print_rename_warning,
    print_status,
    render_favorites,
)
from stamper.errors import DestinationExistsError, ResolutionError, StamperError
from stamper.loader.validator import load_app_config, load_template_config
from stamper.models.args import GenerateArgs, Vcs
from stamper.models.config import app_config_path
from stamper.models.slots import Slot, Value
from stamper.models.template_config import TemplateConfig
from stamper.scaffold.conditionals import merge_conditionals
from stamper.scaffold.context import VariableContext
from stamper.scaffold.filtering import FilterResult, compute_filter
from stamper.scaffold.hooks import HookPolicy, remove_hook_files, run_post_hooks, run_pre_hooks
from stamper.scaffold.resolver import (
    add_missing_provided_values,
    fill_project_variables,
    make_slot_resolver,
)
from stamper.scaffold.walker import TreeWalker, count_files
from stamper.source import vcs
from stamper.source.acquire import (
    Chooser,
    get_source_template_into_temp,
    locate_template_file,
    resolve_template_dir,
)
from stamper.source.location import UserParsedInput
from stamper.variables import (
    ProjectName,
    create_builtin_variables,
    load_env_and_args_template_values,
)
from stamper.versioning import check_version

console = Console()


class Stage(str, Enum):
    """Steps of one expansion, in order."""

    SLOTS_DECLARED = "slots_declared"
    CONDITIONALS_MERGED = "conditionals_merged"
    VARIABLES_RESOLVED = "variables_resolved"
    FILTER_COMPUTED = "filter_computed"
    PRE_HOOKS_RUN = "pre_hooks_run"
    TREE_EXPANDED = "tree_expanded"
    POST_HOOKS_RUN = "post_hooks_run"
    CLEANED = "cleaned"
    FAILED = "failed"


@dataclass
class StageTracker:
    """Records which stage is running and which have completed."""

    current: Stage = Stage.SLOTS_DECLARED
    completed: list[Stage] = field(default_factory=list)

    def begin(self, stage: Stage) -> None:
        self.current = stage

    def finish(self) -> None:
        self.completed.append(self.current)

    def fail(self, error: StamperError) -> None:
        if error.stage is None:
            error.stage = self.current.value
        self.current = Stage.FAILED


@dataclass
class Prompter:
    """Interactive collaborators used by the pipeline."""

    name: Callable[[], str] = interactive.name
    variable: Callable[[Slot], Value] = interactive.variable
    confirm_command: Callable[[str], bool] = interactive.confirm_command
    choose: Chooser = interactive.choose


@dataclass
class ExpansionResult:
    project_dir: Path
    variables: dict[str, Value]
    files: list[Path]
    filter_result: FilterResult
    stages: list[Stage]


def expand_template(
    project_dir: Path,
    name: ProjectName,
    template_dir: Path,
    template_values: Mapping[str, Any],
    config: TemplateConfig,
    args: GenerateArgs,
    prompter: Prompter | None = None,
    tracker: StageTracker | None = None,
) -> ExpansionResult:
    """Expand template_dir into project_dir.

    Args:
        project_dir: Destination directory; created if missing.
        name: The project name.
        template_dir: Root of the scratch copy of the template.
        template_values: Pre-supplied values, highest priority merged.
        config: The parsed template configuration.
        args: Options of the run.
        prompter: Interactive collaborators; defaults to the terminal.
        tracker: Receives stage transitions.

    Returns:
        The resolved variables and the files written.

    Raises:
        StamperError: With ``stage`` set to the stage that failed.
    """
    prompter = prompter or Prompter()
    tracker = tracker or StageTracker()
    try:
        return _expand(
            project_dir, name, template_dir, template_values, config, args, prompter, tracker
        )
    except StamperError as e:
        tracker.fail(e)
        raise


def _expand(
    project_dir: Path,
    name: ProjectName,
    template_dir: Path,
    template_values: Mapping[str, Any],
    config: TemplateConfig,
    args: GenerateArgs,
    prompter: Prompter,
    tracker: StageTracker,
) -> ExpansionResult:
    tracker.begin(Stage.SLOTS_DECLARED)
    context = VariableContext(create_builtin_variables(args, project_dir, name, args.crate_type))
    resolve_slot = make_slot_resolver(template_values, args.silent, prompter.variable)
    fill_project_variables(context, config, resolve_slot)
    add_missing_provided_values(context, template_values)
    tracker.finish()

    tracker.begin(Stage.CONDITIONALS_MERGED)
    merged = merge_conditionals(config, context.snapshot())
    tracker.finish()

    tracker.begin(Stage.VARIABLES_RESOLVED)
    fill_project_variables(context, merged, resolve_slot)
    tracker.finish()

    tracker.begin(Stage.FILTER_COMPUTED)
    section = merged.template
    filter_result = compute_filter(
        template_dir,
        include=section.include if section else None,
        exclude=section.exclude if section else None,
        ignore=section.ignore if section else None,
        hook_files=config.get_hook_files(),
        verbose=args.verbose,
    )
    tracker.finish()

    policy = HookPolicy(
        allow_commands=args.allow_commands,
        silent=args.silent,
        confirm=prompter.confirm_command,
        verbose=args.verbose,
    )
    try:
        tracker.begin(Stage.PRE_HOOKS_RUN)
        run_pre_hooks(config, template_dir, project_dir, context, policy)
        tracker.finish()

        tracker.begin(Stage.TREE_EXPANDED)
        context.assert_exclusive()
        walker = TreeWalker(template_dir, project_dir, context.snapshot(), filter_result)
        entries = walker.plan()
        walker.check_destination(entries)
        print_moving(console, project_dir)
        project_dir.mkdir(parents=True, exist_ok=True)
        progress = create_walk_progress(console)
        if progress is None:
            files = walker.write(entries)
        else:
            with progress:
                task = progress.add_task("Expanding", total=count_files(entries))
                files = walker.write(entries, lambda _rel: progress.advance(task))
        tracker.finish()

        tracker.begin(Stage.POST_HOOKS_RUN)
        run_post_hooks(config, template_dir, project_dir, context, policy)
        tracker.finish()
    finally:
        remove_hook_files(config, template_dir, project_dir)

    tracker.begin(Stage.CLEANED)
    tracker.finish()
    return ExpansionResult(
        project_dir=project_dir,
        variables=dict(context),
        files=files,
        filter_result=filter_result,
        stages=list(tracker.completed),
    )


def resolve_project_name(args: GenerateArgs, prompter: Prompter) -> ProjectName:
    """Return the project name from --name or the prompt.

    Raises:
        ResolutionError: In silent mode without --name.
    """
    if args.name is not None:
        return ProjectName(args.name)
    if args.silent:
        raise ResolutionError(
            "Option `--silent` provided, but project name was not set. Please use `--name`."
        )
    return ProjectName(prompter.name())


def resolve_project_dir(base_dir: Path, name: ProjectName, args: GenerateArgs) -> Path:
    """Return the directory the project is expanded into.

    With ``--init`` this is base_dir itself. Otherwise it is a new
    directory named after the project below ``--destination`` (or
    base_dir).

    Raises:
        ResolutionError: If the name holds no letters or digits.
        DestinationExistsError: If the new directory already exists.
    """
    if args.init:
        return base_dir

    parent = args.destination if args.destination is not None else base_dir
    if args.force:
        dir_name = name.raw()
    else:
        if not name.is_crate_name():
            print_rename_warning(console, name.user_input, name.kebab_case())
        dir_name = name.kebab_case()

    if not dir_name:
        raise ResolutionError(
            f"Cannot derive a directory name from project name '{name.user_input}'"
        )

    project_dir = parent / dir_name
    if project_dir.exists():
        raise DestinationExistsError(
            str(project_dir), "Target directory already exists, aborting!"
        )
    return project_dir


def generate(args: GenerateArgs, prompter: Prompter | None = None) -> Path | None:
    """Generate a project as described by args.

    Returns:
        The project directory, or None when only favorites were listed.

    Raises:
        StamperError: With ``stage`` set to where the run stopped.
    """
    prompter = prompter or Prompter()
    tracker = StageTracker()
    try:
        return _generate(args, prompter, tracker)
    except StamperError as e:
        tracker.fail(e)
        raise


def _generate(args: GenerateArgs, prompter: Prompter, tracker: StageTracker) -> Path | None:
    app_config = load_app_config(app_config_path(args.config))

    if args.list_favorites:
        render_favorites(app_config, console)
        return None

    if args.ssh_identity is None and app_config.defaults.ssh_identity:
        args.ssh_identity = Path(app_config.defaults.ssh_identity).expanduser()

    source = UserParsedInput.from_args_and_config(app_config, args)
    template_values = dict(source.values)
    template_values.update(load_env_and_args_template_values(args))

    scratch_dir, branch = get_source_template_into_temp(source.location)
    try:
        template_dir = resolve_template_dir(
            scratch_dir, source.subfolder, None if args.silent else prompter.choose
        )
        config = load_template_config(locate_template_file(scratch_dir, template_dir))
        check_version(config.template.stamper_version if config.template else None, __version__)

        base_dir = Path.cwd()
        name = resolve_project_name(args, prompter)
        project_dir = resolve_project_dir(base_dir, name, args)

        print_status(console, f"Basedir: {base_dir}")
        print_status(console, "Generating template")

        expand_template(
            project_dir,
            name,
            template_dir,
            template_values,
            config,
            args,
            prompter=prompter,
            tracker=tracker,
        )
    finally:
        shutil.rmtree(scratch_dir, ignore_errors=True)

    selected_vcs = source.vcs if source.vcs is not None and args.vcs is Vcs.git else args.vcs
    if not selected_vcs.is_none() and (not args.init or args.force_git_init):
        console.print("[bold]Initializing a fresh Git repository[/bold]")
        vcs.initialize(selected_vcs, project_dir, branch, args.force_git_init)

    print_done(console, project_dir)
    return project_dir
