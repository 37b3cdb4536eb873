"""Built-in folder templates copied into new projects."""

from typing import Optional

from onyxflow.models import FolderNode, ProjectTemplate, TemplateCategory


def _folder(node_id: str, name: str, *children: FolderNode) -> FolderNode:
    return FolderNode(id=node_id, name=name, children=list(children))


BUILTIN_TEMPLATES: list[ProjectTemplate] = [
    ProjectTemplate(
        id="t1",
        name="Brand Identity",
        category=TemplateCategory.DESIGN,
        structure=[
            _folder("f1", "01_Discovery"),
            _folder(
                "f2", "02_Logos",
                _folder("f2a", "Drafts"),
                _folder("f2b", "Vector"),
            ),
            _folder("f3", "03_Assets"),
            _folder("f4", "04_Final_Exports"),
        ],
    ),
    ProjectTemplate(
        id="t2",
        name="Video Edit",
        category=TemplateCategory.VIDEO,
        structure=[
            _folder(
                "v1", "01_Footage",
                _folder("v1a", "Camera_A"),
                _folder("v1b", "Camera_B"),
            ),
            _folder("v2", "02_ProjectFiles"),
            _folder("v3", "03_Audio"),
            _folder("v4", "04_Renders"),
        ],
    ),
]

# Offered in the create dialog; types without a template use the first one
PROJECT_TYPES = ["Brand Identity", "Video Edit", "Social Media", "Web Design"]


def find_template(
    name: Optional[str], templates: Optional[list[ProjectTemplate]] = None
) -> ProjectTemplate:
    """Template by name, falling back to the first available template."""
    templates = templates or BUILTIN_TEMPLATES
    for template in templates:
        if template.name == name:
            return template
    return templates[0]


def snapshot_structure(template: ProjectTemplate) -> list[FolderNode]:
    """Deep copy of a template's tree, detached from the template."""
    return [node.model_copy(deep=True) for node in template.structure]
