"""Tests for local name allocation."""

from src.ref_flattener.naming import NameAllocator, definition_name


class TestDefinitionName:
    """Test cases for definition_name."""

    def test_name_from_pointer(self):
        assert definition_name("./pets.yaml#/components/schemas/Pet") == "Pet"

    def test_name_from_file(self):
        """Test that whole-document references are named after the file."""
        assert definition_name("./models/pet.yaml") == "pet"
        assert definition_name("https://example.com/schemas/error.json") == "error"

    def test_name_from_short_pointer(self):
        assert definition_name("common.yaml#/Error") == "Error"


class TestNameAllocator:
    """Test cases for NameAllocator."""

    def test_free_candidate(self):
        allocator = NameAllocator()
        name = allocator.allocate("./a.yaml#/components/schemas/Pet", {}, lambda n, o: False)

        assert name == "Pet"

    def test_collision_gets_suffix(self):
        allocator = NameAllocator()
        occupied = {"Pet": {"type": "object"}}

        name = allocator.allocate("./a.yaml#/components/schemas/Pet", occupied, lambda n, o: False)

        assert name == "Pet_2"

    def test_suffix_counts_up(self):
        allocator = NameAllocator()
        occupied = {"Pet": {}, "Pet_2": {}}

        name = allocator.allocate("./a.yaml#/components/schemas/Pet", occupied, lambda n, o: False)

        assert name == "Pet_3"

    def test_reusable_slot_is_returned(self):
        allocator = NameAllocator()
        occupied = {"Pet": {"$ref": "./b.yaml#/Pet"}}

        name = allocator.allocate(
            "./a.yaml#/components/schemas/Pet", occupied, lambda n, o: "$ref" in o
        )

        assert name == "Pet"

    def test_deterministic(self):
        """Test that the same occupancy always yields the same name."""
        allocator = NameAllocator()
        occupied = {"Pet": {}}
        first = allocator.allocate("./a.yaml#/Pet", occupied, lambda n, o: False)
        second = allocator.allocate("./a.yaml#/Pet", occupied, lambda n, o: False)

        assert first == second == "Pet_2"
