"""Current project detection.

Users on OpenShift usually own a family of projects: a base project such as
``bar`` plus derived projects named after it, such as ``bar-che`` and
``bar-jenkins``. When the user is working inside any member of a family the
commands should target the base project.
"""

from collections.abc import Iterable, Sequence

from kube_provision.models import Project

# Only these suffixes have been seen on derived projects so far
DERIVED_SUFFIXES: tuple[str, ...] = ("-che", "-jenkins")


def strip_suffix(name: str, suffixes: Sequence[str] = DERIVED_SUFFIXES) -> str:
    """Strip the longest recognised suffix from a project name.

    Args:
        name: The project name.
        suffixes: Recognised derived-project suffixes.

    Returns:
        The base name, or the name unchanged if it has no recognised suffix.

    """
    for suffix in sorted(suffixes, key=len, reverse=True):
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def family_bases(projects: Iterable[Project], suffixes: Sequence[str] = DERIVED_SUFFIXES) -> list[str]:
    """Return the base names of project families in input order.

    A family exists when a derived project and its undecorated base project
    are both present.

    """
    projects = list(projects)
    names = {project.name for project in projects}
    bases: list[str] = []
    for project in projects:
        base = strip_suffix(project.name, suffixes)
        if base != project.name and base in names and base not in bases:
            bases.append(base)
    return bases


def detect_current_project(
    current: str,
    projects: Iterable[Project],
    suffixes: Sequence[str] = DERIVED_SUFFIXES,
) -> str:
    """Detect the project that namespace-scoped commands should target.

    Args:
        current: The namespace of the current kubeconfig context.
        projects: Projects visible to the user, in the order the API returned them.
        suffixes: Recognised derived-project suffixes.

    Returns:
        The base project to work in, or an empty string when it cannot be
        determined and the caller should fall back to its default namespace.

    """
    bases = family_bases(projects, suffixes)
    if not bases:
        return ""

    stripped = strip_suffix(current, suffixes)
    if stripped in bases:
        return stripped
    if current in bases:
        return current

    prefixed = [base for base in bases if current.startswith(f"{base}-")]
    if prefixed:
        return max(prefixed, key=len)

    return bases[0]
