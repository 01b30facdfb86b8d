"""
Integration tests for applying milestone templates to a project.
"""

from datetime import date

import pytest

from roadmap.models.enums import DependencyType, MilestonePriority, MilestoneType
from roadmap.models.template import (
    MilestoneDefinitionOverride,
    MilestoneTemplateCreate,
    TemplateOverrides,
)

from conftest import PROJECT_START


@pytest.fixture
def make_template(template_repo):
    async def _make(template_data):
        return await template_repo.create(
            MilestoneTemplateCreate(name="Launch", template_data=template_data)
        )

    return _make


@pytest.mark.asyncio
async def test_creates_milestones_deliverables_and_dependencies(
    milestone_service, deliverable_repo, dependency_repo, template_repo, make_template, project, sink
):
    template = await make_template(
        {
            "milestones": [
                {
                    "title": "Design",
                    "target_offset_days": 14,
                    "milestone_type": "DECISION_GATE",
                    "priority_level": "HIGH",
                    "is_critical": True,
                    "deliverables": [
                        {"name": "UX flows", "due_offset_days": 10},
                        {"description": "No name, no offset"},
                    ],
                },
                {"title": "Build", "target_offset_days": 45, "owner_id": "dev_lead"},
            ],
            "dependencies": [
                {
                    "predecessor_index": 0,
                    "successor_index": 1,
                    "dependency_type": "START_TO_START",
                    "lag_days": 2,
                }
            ],
        }
    )

    design, build = await milestone_service.apply_template(template, project)

    assert design.target_date == date(2024, 5, 15)
    assert design.milestone_type == MilestoneType.DECISION_GATE
    assert design.priority_level == MilestonePriority.HIGH
    assert design.is_critical is True
    assert design.owner_id == project.user_id
    assert build.target_date == date(2024, 6, 15)
    assert build.owner_id == "dev_lead"

    deliverables = await deliverable_repo.list_by_milestone(design.id)
    assert [(d.name, d.due_date) for d in deliverables] == [
        ("UX flows", date(2024, 5, 11)),
        ("Deliverable", date(2024, 5, 15)),
    ]
    assert all(d.owner_id == project.user_id for d in deliverables)

    [edge] = await dependency_repo.list_active_by_successor(build.id)
    assert edge.predecessor_id == design.id
    assert edge.dependency_type == DependencyType.START_TO_START
    assert edge.lag_days == 2

    assert (await template_repo.get(template.id)).usage_count == 1
    assert sink.alerts == []


@pytest.mark.asyncio
async def test_overrides(milestone_service, make_template, project):
    template = await make_template(
        {"milestones": [{"title": "Design", "target_offset_days": 14}, {"target_offset_days": 30}]}
    )

    design, second = await milestone_service.apply_template(
        template,
        project,
        TemplateOverrides(
            base_date=date(2024, 6, 1),
            milestones={0: MilestoneDefinitionOverride(title="Discovery", owner_id="designer")},
        ),
    )

    assert design.title == "Discovery"
    assert design.owner_id == "designer"
    assert design.target_date == date(2024, 6, 15)
    assert second.title == "Milestone 2"
    assert second.target_date == date(2024, 7, 1)


@pytest.mark.asyncio
async def test_override_target_date_wins(milestone_service, make_template, project):
    template = await make_template({"milestones": [{"title": "Design", "target_offset_days": 14}]})

    [design] = await milestone_service.apply_template(
        template,
        project,
        TemplateOverrides(milestones={0: MilestoneDefinitionOverride(target_date=date(2024, 8, 1))}),
    )

    assert design.target_date == date(2024, 8, 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("template_data", [{}, {"milestones": []}, {"milestones": "not a list"}])
async def test_nothing_to_apply(milestone_service, template_repo, make_template, project, template_data):
    template = await make_template(template_data)

    assert await milestone_service.apply_template(template, project) == []
    assert (await template_repo.get(template.id)).usage_count == 0


@pytest.mark.asyncio
async def test_malformed_definitions_are_skipped(
    milestone_service,
    dependency_repo,
    deliverable_repo,
    template_repo,
    make_template,
    project,
    milestone_repo,
):
    template = await make_template(
        {
            "milestones": [
                {"title": "Good", "target_offset_days": 5},
                "not a mapping",
                {"title": "Bad offset", "target_offset_days": "soon"},
                {"title": "Bad type", "milestone_type": "PARTY"},
                {
                    "title": "Also good",
                    "target_offset_days": 10,
                    "deliverables": [
                        "bad",
                        {"name": "Ok"},
                        {"name": "Far off", "due_offset_days": 10**9},
                    ],
                },
                {"title": "Huge offset", "target_offset_days": 10**9},
            ],
            "dependencies": [
                {"predecessor_index": 0, "successor_index": 4},
                {"predecessor_index": 4, "successor_index": 0},
                {"predecessor_index": 0, "successor_index": 1},
                {"predecessor_index": "0", "successor_index": 4},
                {"predecessor_index": 0, "successor_index": 0},
                {"predecessor_index": 0, "successor_index": 4, "lag_days": 1},
                {"predecessor_index": 4, "successor_index": 0, "dependency_type": "SOMETIMES"},
                "not a mapping",
            ],
        }
    )

    created = await milestone_service.apply_template(template, project)

    assert [m.title for m in created] == ["Good", "Also good"]
    assert [m.title for m in await milestone_repo.list_by_project(project.id)] == ["Good", "Also good"]
    good, also_good = created
    [edge] = await dependency_repo.list_active_by_successor(also_good.id)
    assert edge.predecessor_id == good.id
    assert await dependency_repo.list_active_by_successor(good.id) == []
    assert [d.name for d in await deliverable_repo.list_by_milestone(also_good.id)] == ["Ok"]
    assert (await template_repo.get(template.id)).usage_count == 1


@pytest.mark.asyncio
async def test_base_date_defaults_to_project_start(milestone_service, make_template, project):
    template = await make_template({"milestones": [{"title": "Kickoff"}]})

    [kickoff] = await milestone_service.apply_template(template, project)

    assert kickoff.target_date == PROJECT_START
