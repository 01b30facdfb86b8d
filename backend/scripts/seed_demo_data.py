"""
Seed a demo roadmap: one project, a milestone template applied to it,
a few tasks feeding the milestones and one slip cascaded downstream.

Usage:
    cd backend
    python -m scripts.seed_demo_data          # Dry-run (shows what will be created)
    python -m scripts.seed_demo_data --apply   # Actually insert data
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

# Suppress noisy SQLAlchemy logs during seed
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine.Engine").setLevel(logging.WARNING)

# Ensure backend root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from roadmap.core.config import get_settings
from roadmap.models.enums import MilestoneStatus, TaskStatus
from roadmap.models.project import ProjectCreate
from roadmap.models.task import TaskCreate
from roadmap.models.template import MilestoneTemplateCreate

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
OWNER_ID = "demo-owner"
MEMBER_IDS = ["demo-designer", "demo-engineer"]
TODAY = date.today()
PROJECT_START = TODAY - timedelta(days=20)

TEMPLATE = MilestoneTemplateCreate(
    name="Product launch",
    description="Design, build, beta and release",
    template_data={
        "milestones": [
            {
                "title": "Design sign-off",
                "target_offset_days": 14,
                "milestone_type": "DECISION_GATE",
                "is_critical": True,
                "deliverables": [
                    {"name": "UX flows", "due_offset_days": 10},
                    {"name": "Architecture note"},
                ],
            },
            {"title": "Feature complete", "target_offset_days": 45, "is_critical": True},
            {"title": "Public beta", "target_offset_days": 60, "milestone_type": "RELEASE"},
            {"title": "General availability", "target_offset_days": 75, "priority_level": "HIGH"},
        ],
        "dependencies": [
            {"predecessor_index": 0, "successor_index": 1},
            {"predecessor_index": 1, "successor_index": 2, "lag_days": 2},
            {"predecessor_index": 2, "successor_index": 3},
        ],
    },
)

TASKS = [
    {"title": "Interview five customers", "status": TaskStatus.DONE, "progress": 100, "weight": 1},
    {"title": "Draft UX flows", "status": TaskStatus.IN_PROGRESS, "progress": 60, "weight": 2},
    {"title": "Write architecture note", "status": TaskStatus.TODO, "progress": 0, "weight": 1},
]


def _print_plan() -> None:
    print(f"\nProject (1): Demo launch, starts {PROJECT_START}, owner {OWNER_ID}")
    print(f"\nMembers ({len(MEMBER_IDS)}): {', '.join(MEMBER_IDS)}")
    definitions = TEMPLATE.template_data["milestones"]
    print(f"\nMilestones ({len(definitions)}) from template '{TEMPLATE.name}':")
    for definition in definitions:
        target = PROJECT_START + timedelta(days=definition["target_offset_days"])
        print(f"  - {definition['title']:25s} target={target}")
    print(f"\nDependencies ({len(TEMPLATE.template_data['dependencies'])}): chain 0 -> 1 -> 2 -> 3")
    print(f"\nTasks ({len(TASKS)}) on '{definitions[0]['title']}':")
    for t in TASKS:
        print(f"  - [{t['status'].value:11s}] {t['title']} (weight {t['weight']})")
    print("\nThen: start the first milestone, recompute its progress, slip it by 3 days")
    print("\n-> run with --apply to insert")


async def seed(*, dry_run: bool = True) -> None:
    settings = get_settings()
    if dry_run:
        print("=" * 60)
        print("  DRY RUN - showing what will be created")
        print("=" * 60)
        _print_plan()
        return

    from roadmap import deps
    from roadmap.infrastructure.local.database import init_db

    print(f"Seeding into {settings.DATABASE_URL}")
    await init_db(deps.get_db_engine())

    project_repo = deps.get_project_repository()
    member_repo = deps.get_project_member_repository()
    task_repo = deps.get_task_repository()
    milestone_service = deps.get_milestone_service()

    print("\n--- Creating Project ---")
    project = await project_repo.create(
        OWNER_ID,
        ProjectCreate(
            name="Demo launch",
            description="Seeded demo roadmap",
            start_date=PROJECT_START,
            end_date=PROJECT_START + timedelta(days=90),
        ),
    )
    print(f"  [OK] {project.name:30s} id={project.id}")

    print("\n--- Creating Project Members ---")
    for member_id in MEMBER_IDS:
        await member_repo.add(project.id, member_id)
        print(f"  [OK] {member_id}")

    print("\n--- Applying Template ---")
    template = await deps.get_template_repository().create(TEMPLATE)
    milestones = await milestone_service.apply_template(template, project)
    for milestone in milestones:
        print(f"  [OK] {milestone.title:25s} target={milestone.target_date} id={milestone.id}")

    first = milestones[0]
    print("\n--- Creating Tasks ---")
    for t in TASKS:
        task = await task_repo.create(
            TaskCreate(
                title=t["title"],
                project_id=project.id,
                status=t["status"],
                progress=t["progress"],
            )
        )
        await task_repo.attach_to_milestone(first.id, task.id, weight=t["weight"])
        print(f"  [OK] {task.title}")

    print("\n--- Progress & Cascade ---")
    started = await milestone_service.update_status(first, MilestoneStatus.IN_PROGRESS)
    updated = await milestone_service.update_progress(started)
    print(
        f"  [OK] {updated.title}: {updated.completion_percentage}% "
        f"variance={updated.schedule_variance_days}d at_risk={updated.is_at_risk}"
    )
    _, shifted = await milestone_service.reschedule(
        updated, updated.target_date + timedelta(days=3)
    )
    for milestone in shifted:
        print(f"  [OK] shifted {milestone.title:25s} -> {milestone.target_date}")

    print("\n" + "=" * 60)
    print(f"  Done. Project id: {project.id}")
    print("=" * 60)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo roadmap.")
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Actually insert data. Default is dry-run.",
    )
    args = parser.parse_args()
    asyncio.run(seed(dry_run=not args.apply))


if __name__ == "__main__":
    main()
