"""
Data validation
===============

Linear checks over the three in-memory collections:
- duplicate IDs per collection
- numeric range checks (priority, qualification, duration, loads)
- client -> task referential integrity
- skill coverage and availability warnings
"""

from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence

from ..models import Client, EntityType, Task, ValidationIssue, ValidationSummary, Worker


LEVEL_MIN = 1
LEVEL_MAX = 5


def _issue(
    issue_id: str,
    entity_type: EntityType,
    entity_id: str,
    row: int,
    field: str,
    code: str,
    message: str,
    suggestion: str,
    kind: str = "error",
    value: Any = None,
) -> ValidationIssue:
    return ValidationIssue(
        id=issue_id,
        type=kind,
        entity_type=entity_type,
        entity_id=entity_id,
        row=row,
        field=field,
        value=value,
        code=code,
        message=message,
        suggestion=suggestion,
    )


def _out_of_level_range(value: Optional[int]) -> bool:
    return value is None or value < LEVEL_MIN or value > LEVEL_MAX


def _below_one(value: Optional[int]) -> bool:
    return value is None or value < 1


def _validate_clients(clients: Sequence[Client], task_ids: set) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    seen = set()
    for row, client in enumerate(clients):
        cid = client.client_id
        if cid in seen:
            issues.append(_issue(
                f"dup-client-{cid}", EntityType.CLIENTS, cid, row, "ClientID", "duplicate_id",
                f"Duplicate Client ID: {cid}", "Use unique IDs for each client", value=cid,
            ))
        seen.add(cid)

        if _out_of_level_range(client.priority_level):
            issues.append(_issue(
                f"priority-{cid}", EntityType.CLIENTS, cid, row, "PriorityLevel", "priority_range",
                f"Priority must be 1-5, got {client.priority_level}", "Set priority between 1 and 5",
                value=client.priority_level,
            ))

    for row, client in enumerate(clients):
        for task_id in client.requested_task_ids:
            if task_id not in task_ids:
                issues.append(_issue(
                    f"unknown-task-{client.client_id}-{task_id}", EntityType.CLIENTS, client.client_id, row,
                    "RequestedTaskIDs", "unknown_task",
                    f"Unknown task ID: {task_id}", "Remove invalid task ID or add corresponding task",
                    value=task_id,
                ))
    return issues


def _validate_workers(workers: Sequence[Worker]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    seen = set()
    for row, worker in enumerate(workers):
        wid = worker.worker_id
        if wid in seen:
            issues.append(_issue(
                f"dup-worker-{wid}", EntityType.WORKERS, wid, row, "WorkerID", "duplicate_id",
                f"Duplicate Worker ID: {wid}", "Use unique IDs for each worker", value=wid,
            ))
        seen.add(wid)

        if _out_of_level_range(worker.qualification_level):
            issues.append(_issue(
                f"qual-{wid}", EntityType.WORKERS, wid, row, "QualificationLevel", "qualification_range",
                f"Qualification must be 1-5, got {worker.qualification_level}",
                "Set qualification between 1 and 5", value=worker.qualification_level,
            ))

        if _below_one(worker.max_load_per_phase):
            issues.append(_issue(
                f"maxload-{wid}", EntityType.WORKERS, wid, row, "MaxLoadPerPhase", "max_load_range",
                f"Max load per phase must be at least 1, got {worker.max_load_per_phase}",
                "Set max load per phase to a positive number", value=worker.max_load_per_phase,
            ))

        if not worker.available_slots:
            issues.append(_issue(
                f"slots-{wid}", EntityType.WORKERS, wid, row, "AvailableSlots", "no_slots",
                f"Worker {wid} has no available slots", "Add at least one available slot",
                kind="warning", value=worker.available_slots,
            ))
    return issues


def _validate_tasks(tasks: Sequence[Task], workers: Sequence[Worker]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    worker_skills = {skill.lower() for worker in workers for skill in worker.skills}
    seen = set()
    for row, task in enumerate(tasks):
        tid = task.task_id
        if tid in seen:
            issues.append(_issue(
                f"dup-task-{tid}", EntityType.TASKS, tid, row, "TaskID", "duplicate_id",
                f"Duplicate Task ID: {tid}", "Use unique IDs for each task", value=tid,
            ))
        seen.add(tid)

        if _below_one(task.duration):
            issues.append(_issue(
                f"duration-{tid}", EntityType.TASKS, tid, row, "Duration", "duration_range",
                f"Duration must be at least 1, got {task.duration}", "Set duration to positive number",
                value=task.duration,
            ))

        if _below_one(task.max_concurrent):
            issues.append(_issue(
                f"maxconcurrent-{tid}", EntityType.TASKS, tid, row, "MaxConcurrent", "max_concurrent_range",
                f"Max concurrent must be at least 1, got {task.max_concurrent}",
                "Set max concurrent to a positive number", value=task.max_concurrent,
            ))

        if workers:
            for skill in task.required_skills:
                if skill.lower() not in worker_skills:
                    issues.append(_issue(
                        f"skill-{tid}-{skill}", EntityType.TASKS, tid, row, "RequiredSkills", "uncovered_skill",
                        f"No worker has required skill: {skill}",
                        "Add a worker with this skill or remove it from the task",
                        kind="warning", value=skill,
                    ))
    return issues


def validate_data(
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
) -> List[ValidationIssue]:
    """Run every check and return issues in a stable order."""

    task_ids = {task.task_id for task in tasks}
    issues = _validate_clients(clients, task_ids)
    issues.extend(_validate_workers(workers))
    issues.extend(_validate_tasks(tasks, workers))
    return issues


def quality_label(score: int) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 75:
        return "Good"
    if score >= 50:
        return "Fair"
    if score >= 25:
        return "Poor"
    return "Critical"


def data_quality(total_records: int, error_count: int, warning_count: int) -> int:
    """Share of records without errors, minus a small penalty for warnings.

    Halves round up, so 72.5 scores 73.
    """
    if total_records == 0:
        return 100
    base = max(0.0, (total_records - error_count) / total_records * 100)
    penalty = warning_count / total_records * 10
    return max(0, min(100, math.floor(base - penalty + 0.5)))


def summarize(issues: Sequence[ValidationIssue], total_records: int) -> ValidationSummary:
    errors = sum(1 for i in issues if i.type == "error")
    warnings = sum(1 for i in issues if i.type == "warning")
    if errors:
        status = "Has Errors"
    elif warnings:
        status = "Has Warnings"
    else:
        status = "All Valid"
    score = data_quality(total_records, errors, warnings)
    return ValidationSummary(
        total_records=total_records,
        error_count=errors,
        warning_count=warnings,
        status=status,
        data_quality=score,
        quality_label=quality_label(score),
    )
