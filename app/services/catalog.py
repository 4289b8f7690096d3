"""Roles and metrics: creation, removal, goal and visibility edits.

List and lookup reads never mutate the catalog.  The core behavior
metrics are healed by :meth:`CatalogService.ensure_core_metrics`, which
role creation and catalog initialization call, and by
:meth:`CatalogService.load_healed`, which the scorecard operations read
through: it writes only for roles that lack a core metric.  A heal that
loses a race to a concurrent request creating the same metric counts as
healed.
"""
import logging
import math
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import ValidationError as SchemaError

from app.core.errors import NotFound, PersistenceError, ValidationError
from app.schemas.catalog import GoalUpdate, Metric, MetricCreate, MetricSpec, MetricType, Role, VisibilityUpdate
from app.services.batch import run_batch
from app.services.defaults import (
    CORE_BEHAVIOR_METRIC_NAMES,
    CORE_BEHAVIOR_METRICS,
    ROLE_TEMPLATES,
    is_core_behavior_metric,
)
from app.store.base import ScorecardStore

logger = logging.getLogger(__name__)


def validate_goal(goal_value: Any) -> float:
    if isinstance(goal_value, bool) or not isinstance(goal_value, (int, float)):
        raise ValidationError(f"Goal value must be a number, got {goal_value!r}")
    if not math.isfinite(goal_value) or goal_value < 0:
        raise ValidationError("Goal value must be zero or greater")
    return float(goal_value)


def _parse(model, item: Any):
    if isinstance(item, model):
        return item
    try:
        return model.model_validate(item)
    except SchemaError as exc:
        raise ValidationError(str(exc)) from exc


def _next_display_order(metrics: Sequence[Metric]) -> int:
    return max((m.display_order for m in metrics), default=0) + 1


class CatalogService:

    def __init__(self, store: ScorecardStore):
        self.store = store

    # Reads

    async def list_roles(self, owner_id: str) -> List[Role]:
        return await self.store.get_roles(owner_id)

    async def list_metrics(self, owner_id: str, role_id: int) -> List[Metric]:
        await self.get_owned_role(owner_id, role_id)
        return await self.store.get_metrics([role_id])

    async def load(self, owner_id: str) -> List[Tuple[Role, List[Metric]]]:
        """Every role of the owner (name order) with its metrics (display order).

        Two store calls regardless of role count.
        """
        roles = await self.store.get_roles(owner_id)
        roles = sorted(roles, key=lambda r: (r.name, r.id))
        metrics = await self.store.get_metrics([r.id for r in roles]) if roles else []
        by_role: Dict[int, List[Metric]] = {r.id: [] for r in roles}
        for metric in metrics:
            by_role.setdefault(metric.role_id, []).append(metric)
        return [
            (role, sorted(by_role[role.id], key=lambda m: (m.display_order, m.id)))
            for role in roles
        ]

    async def get_owned_role(self, owner_id: str, role_id: int) -> Role:
        role = await self.store.get_role(role_id)
        if role is None or role.owner_id != owner_id:
            raise NotFound("Role not found or access denied")
        return role

    async def get_owned_metric(self, owner_id: str, metric_id: int) -> Metric:
        metric = await self.store.get_metric(metric_id)
        if metric is None:
            raise NotFound("Metric not found")
        role = await self.store.get_role(metric.role_id)
        if role is None or role.owner_id != owner_id:
            raise NotFound("Metric not found or access denied")
        return metric

    # Self-healing

    async def ensure_core_metrics(self, owner_id: str) -> int:
        """Append missing core behavior metrics to every role of the owner.

        Idempotent.  Returns how many metrics were added.
        """
        return await self._heal(await self.load(owner_id))

    async def load_healed(self, owner_id: str) -> List[Tuple[Role, List[Metric]]]:
        """:meth:`load`, with core behavior metrics appended where missing.

        Writes and reloads only when some role lacks a core metric.
        """
        catalog = await self.load(owner_id)
        if all(CORE_BEHAVIOR_METRIC_NAMES <= {m.name for m in metrics} for _, metrics in catalog):
            return catalog
        await self._heal(catalog)
        return await self.load(owner_id)

    async def _heal(self, catalog: List[Tuple[Role, List[Metric]]]) -> int:
        added = 0
        for role, metrics in catalog:
            added += await self._append_missing(role, metrics, CORE_BEHAVIOR_METRICS)
        return added

    async def _append_missing(self, role: Role, metrics: List[Metric], specs: Sequence[MetricSpec]) -> int:
        existing = {m.name for m in metrics}
        order = _next_display_order(metrics)
        added = 0
        for spec in specs:
            if spec.name in existing:
                continue
            try:
                await self.store.create_metric(
                    role_id=role.id,
                    name=spec.name,
                    metric_type=spec.metric_type,
                    goal_value=spec.goal_value,
                    is_inverted=spec.is_inverted,
                    display_order=order,
                )
            except PersistenceError:
                # Unique (role, name) violation from a concurrent heal is fine
                current = await self.store.get_metrics([role.id])
                if not any(m.name == spec.name for m in current):
                    raise
                logger.debug("Metric %r already added to role %r", spec.name, role.name)
                existing.add(spec.name)
                order = max(order, _next_display_order(current))
                continue
            logger.info("Added metric %r to role %r", spec.name, role.name)
            existing.add(spec.name)
            order += 1
            added += 1
        return added

    async def initialize_catalog(self, owner_id: str, seed_templates: bool = True) -> List[Role]:
        """Create the template roles and their metrics where missing."""
        if seed_templates:
            current = {role.name: (role, metrics) for role, metrics in await self.load(owner_id)}
            for role_name, specs in ROLE_TEMPLATES.items():
                if role_name in current:
                    role, metrics = current[role_name]
                else:
                    role, metrics = await self.store.create_role(owner_id, role_name), []
                    logger.info("Created template role %r for owner %s", role_name, owner_id)
                await self._append_missing(role, metrics, specs)
        await self.ensure_core_metrics(owner_id)
        return await self.store.get_roles(owner_id)

    # Roles

    async def create_role(self, owner_id: str, name: Any) -> Role:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Role name is required")
        name = name.strip()
        existing = await self.store.get_roles(owner_id)
        if any(r.name == name for r in existing):
            raise ValidationError("Role already exists")

        role = await self.store.create_role(owner_id, name)
        await self._append_missing(role, [], CORE_BEHAVIOR_METRICS)
        logger.info("Created role %r (%s) for owner %s", name, role.id, owner_id)
        return role

    async def delete_role(self, owner_id: str, role_id: int) -> None:
        await self.get_owned_role(owner_id, role_id)
        await self.store.delete_role(role_id)
        logger.info("Deleted role %s", role_id)

    # Metrics

    async def create_metric(self, owner_id: str, role_id: int, data: Any) -> Metric:
        data = _parse(MetricCreate, data)
        name = data.name.strip()
        if not name:
            raise ValidationError("Metric name is required")
        goal_value = validate_goal(data.goal_value)

        role = await self.get_owned_role(owner_id, role_id)
        metrics = await self.store.get_metrics([role.id])
        if any(m.name == name for m in metrics):
            raise ValidationError(f"Metric {name!r} already exists on this role")

        metric = await self.store.create_metric(
            role_id=role.id,
            name=name,
            metric_type=MetricType(data.metric_type),
            goal_value=goal_value,
            is_inverted=data.is_inverted,
            display_order=_next_display_order(metrics),
            is_visible=data.is_visible,
        )
        logger.info("Created metric %r on role %r", name, role.name)
        return metric

    async def delete_metric(self, owner_id: str, metric_id: int) -> None:
        metric = await self.get_owned_metric(owner_id, metric_id)
        if is_core_behavior_metric(metric.name):
            raise ValidationError(f"{metric.name} is a core behavior metric and cannot be removed")
        await self.store.delete_metric(metric_id)
        logger.info("Deleted metric %s", metric_id)

    async def update_metric_goal(self, owner_id: str, metric_id: int, goal_value: Any) -> None:
        goal_value = validate_goal(goal_value)
        await self.get_owned_metric(owner_id, metric_id)
        await self.store.upsert_metric_goal(metric_id, goal_value)

    async def update_metric_goals(self, owner_id: str, items: Sequence[Any]) -> int:
        async def apply(item: Any) -> None:
            update = _parse(GoalUpdate, item)
            await self.update_metric_goal(owner_id, update.metric_id, update.goal_value)

        return await run_batch("update_metric_goals", items, apply)

    async def update_metric_visibilities(self, owner_id: str, items: Sequence[Any]) -> int:
        async def apply(item: Any) -> None:
            update = _parse(VisibilityUpdate, item)
            await self.get_owned_metric(owner_id, update.metric_id)
            await self.store.set_metric_visibility(update.metric_id, update.is_visible)

        return await run_batch("update_metric_visibilities", items, apply)
