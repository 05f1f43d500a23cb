from portfolio_api import config
from portfolio_api.core.models import AllowListEntry

SECTIONS = {
    "projects": "PROJECT_REPOS",
    "software": "SOFTWARE_REPOS",
}


def load_allow_list(sections: dict[str, dict] | None = None) -> dict[str, AllowListEntry]:
    """Merge the configured repository sections into a single name -> entry mapping.

    A name configured in several sections keeps its first occurrence,
    in the order of `SECTIONS`.
    """
    if sections is None:
        sections = {section: config.configuration.get(key) or {} for section, key in SECTIONS.items()}
    entries: dict[str, AllowListEntry] = {}
    for section, repos in sections.items():
        for name, params in repos.items():
            if name in entries:
                continue
            entries[name] = AllowListEntry(
                name=name,
                section=section,
                order=int(params.get("order", 0)),
                owner=params.get("owner"),
                title=params.get("title"),
                description=params.get("description"),
                libraries=tuple(params.get("libraries", [])),
                in_progress=bool(params.get("in_progress", False)),
            )
    return entries


def owner_overrides(entries: dict[str, AllowListEntry]) -> dict[str, str | None]:
    return {name: entry.owner for name, entry in entries.items()}


def sorted_entries(entries: dict[str, AllowListEntry]) -> list[AllowListEntry]:
    """Entries grouped by section, in the order of `SECTIONS`, then by their `order`."""
    rank = {section: index for index, section in enumerate(SECTIONS)}
    return sorted(
        entries.values(), key=lambda entry: (rank.get(entry.section, len(rank)), entry.order)
    )
