"""Local name allocation for flattened definitions."""

from typing import Any, Callable, Mapping

from .ref_utils import ref_fragment, ref_location

DEFAULT_NAME = "definition"


def definition_name(ref: str) -> str:
    """
    Derive the plausible local name of a reference.

    The last segment of the JSON pointer wins; a reference to a whole document is
    named after its file without extension.

    Args:
        ref: Raw reference string (e.g. "./common.yaml#/components/schemas/Error")

    Returns:
        Candidate name (e.g. "Error")
    """
    pointer = ref_fragment(ref).strip("/")
    if pointer:
        name = pointer.split("/")[-1]
    else:
        file_name = ref_location(ref).rstrip("/").split("/")[-1]
        name = file_name.split(".")[0]
    return name or DEFAULT_NAME


class NameAllocator:
    """Picks collision-free names in a definition namespace."""

    def allocate(
        self,
        ref: str,
        occupied: Mapping[str, Any],
        reusable: Callable[[str, Any], bool],
    ) -> str:
        """
        Allocate a local name for a reference.

        Args:
            ref: Raw reference being flattened
            occupied: Current namespace for the definition kind (name -> definition)
            reusable: Tells whether an occupied slot may be handed out again; called
                with the slot name and its occupant

        Returns:
            The candidate name if free or reusable, otherwise the first free or
            reusable "<candidate>_<n>" with n counting up from 2
        """
        candidate = definition_name(ref)
        name = candidate
        counter = 2
        while name in occupied and not reusable(name, occupied[name]):
            name = f"{candidate}_{counter}"
            counter += 1
        return name
