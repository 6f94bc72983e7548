"""Reconcile an existing configuration with a newly requested one."""

import logging
from typing import List, Optional, Sequence, Union

from ..models import (
    ComponentKind,
    ComponentNames,
    ComponentRef,
    ExistingConfig,
    KindDiff,
    MergeDiff,
    MergeStrategy,
    ProjectConfig,
    ResolvedComponents,
    ResolvedConfig,
    StoredComponent,
    StoredHook,
)

logger = logging.getLogger(__name__)


def merge(
    existing: ExistingConfig,
    requested: ProjectConfig,
    strategy: Union[MergeStrategy, str] = MergeStrategy.MERGE,
) -> Optional[ResolvedConfig]:
    """Resolve the configuration to generate.

    Args:
        existing: Configuration loaded from disk
        requested: Newly requested configuration
        strategy: ``merge``, ``replace``, ``backup-replace`` or ``cancel``

    Returns:
        The resolved configuration, or None when the strategy is ``cancel``.
        For ``backup-replace`` the caller must snapshot the directory with
        BackupManager before writing.

    Raises:
        ValueError: If the strategy is unknown
    """
    strategy = MergeStrategy(strategy)

    if strategy is MergeStrategy.CANCEL:
        return None

    fields = requested.model_dump(exclude={"components", "preserved_context", "strategy"})

    if strategy in (MergeStrategy.REPLACE, MergeStrategy.BACKUP_REPLACE):
        return ResolvedConfig(
            **fields,
            components=ResolvedComponents(
                skills=[ComponentRef(name=n, kind="skill") for n in requested.skills],
                agents=[ComponentRef(name=n, kind="agent") for n in requested.agents],
                hooks=[ComponentRef(name=n, kind="hook") for n in requested.hooks],
                custom=list(requested.custom_components),
            ),
            strategy=strategy,
        )

    components = ResolvedComponents(
        skills=merge_components(existing.skills, requested.skills, "skill"),
        agents=merge_components(existing.agents, requested.agents, "agent"),
        hooks=merge_components(existing.hooks, requested.hooks, "hook"),
        custom=[*existing.custom, *requested.custom_components],
    )
    logger.debug(
        "Merged %d skills, %d agents, %d hooks",
        len(components.skills),
        len(components.agents),
        len(components.hooks),
    )
    return ResolvedConfig(
        **fields,
        components=components,
        preserved_context=dict(existing.preserved_context),
        strategy=strategy,
    )


def merge_components(
    existing: Sequence[Union[StoredComponent, StoredHook]],
    requested: Sequence[str],
    kind: ComponentKind,
) -> List[ComponentRef]:
    """Merge one kind of component.

    Requested names already on disk become updates that carry their custom
    sections forward. Requested names not on disk are new. Names on disk
    that were not requested are kept untouched.
    """
    existing_by_name = {item.name: item for item in existing}
    merged: List[ComponentRef] = []
    seen = set()

    for name in requested:
        if name in seen:
            continue
        seen.add(name)

        item = existing_by_name.get(name)
        if item is None:
            merged.append(ComponentRef(name=name, kind=kind, status="new"))
        else:
            merged.append(
                ComponentRef(
                    name=name,
                    kind=kind,
                    status="update",
                    custom_sections=getattr(item, "custom_sections", ""),
                )
            )

    for item in existing:
        if item.name in seen:
            continue
        merged.append(
            ComponentRef(
                name=item.name,
                kind=kind,
                status="existing",
                content=item.content,
                custom_sections=getattr(item, "custom_sections", ""),
            )
        )

    return merged


def diff(
    existing: Union[ExistingConfig, ComponentNames],
    requested: Union[ProjectConfig, ComponentNames],
) -> MergeDiff:
    """Summarize name-level changes between two configurations.

    ``added``/``kept`` follow the requested order, ``removed`` follows the
    existing order.
    """
    old = existing.names() if isinstance(existing, ExistingConfig) else existing
    new = requested.names() if isinstance(requested, ProjectConfig) else requested

    return MergeDiff(
        skills=_diff_names(old.skills, new.skills),
        agents=_diff_names(old.agents, new.agents),
        hooks=_diff_names(old.hooks, new.hooks),
    )


def _diff_names(old: Sequence[str], new: Sequence[str]) -> KindDiff:
    old_set, new_set = set(old), set(new)
    new_unique = list(dict.fromkeys(new))
    return KindDiff(
        added=[n for n in new_unique if n not in old_set],
        removed=[n for n in dict.fromkeys(old) if n not in new_set],
        kept=[n for n in new_unique if n in old_set],
    )


def format_diff(merge_diff: MergeDiff) -> str:
    """Render a diff as ``Skills: +2 new, 3 kept, -1 removed`` lines."""
    lines = []
    for label, section in (
        ("Skills", merge_diff.skills),
        ("Agents", merge_diff.agents),
        ("Hooks", merge_diff.hooks),
    ):
        parts = []
        if section.added:
            parts.append(f"+{len(section.added)} new")
        if section.kept:
            parts.append(f"{len(section.kept)} kept")
        if section.removed:
            parts.append(f"-{len(section.removed)} removed")
        if parts:
            lines.append(f"{label}: {', '.join(parts)}")
    return "\n".join(lines)
