"""Tests for relation hydration."""

import copy

import pytest

from scoredb.core.errors import InvalidArgumentError
from scoredb.storage.cache import CacheManager
from scoredb.storage.relation import Relation


@pytest.fixture
def populated(storage, sample_guilds, sample_users):
    """Storage holding guilds and users."""
    for guild in sample_guilds:
        storage.save("guilds", guild)
    for user in sample_users:
        storage.save("users", user)
    return storage


class TestBinding:
    """Tests for the binding registry."""

    def test_bind_records_binding(self, relation):
        binding = relation.bind("users", "guildId", "guilds", "uuid", "guildData")

        assert binding.reverse is False
        assert relation.bindings_for("users") == [binding]
        assert relation.bindings_for("guilds") == []

    def test_bind_reverse(self, relation):
        binding = relation.bind_reverse("guilds", "uuid", "users", "guildId", "members")
        assert binding.reverse is True

    @pytest.mark.parametrize("args", [
        ("", "guildId", "guilds", "uuid", "guildData"),
        ("users", "", "guilds", "uuid", "guildData"),
        ("users", "guildId", "", "uuid", "guildData"),
        ("users", "guildId", "guilds", "", "guildData"),
        ("users", "guildId", "guilds", "uuid", ""),
        ("users", None, "guilds", "uuid", "guildData"),
    ])
    def test_bind_rejects_empty_parameters(self, relation, args):
        with pytest.raises(InvalidArgumentError):
            relation.bind(*args)
        assert relation.bindings_for("users") == []

    def test_reset(self, relation):
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        relation.reset()
        assert relation.bindings_for("users") == []


class TestDirect:
    """Tests for direct relations."""

    def test_single_reference(self, relation, populated):
        """Test a scalar local value is replaced by the matching target."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")

        user = populated.get_element_by_id("users", 1)
        result = relation.populate("users", user)

        assert result["guildData"]["name"] == "Builders"
        assert result["guildId"] == "g1"

    def test_unmatched_reference(self, relation, populated):
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")

        result = relation.populate("users", {"name": "Lost", "guildId": "g404"})

        assert result["guildData"] is None

    def test_missing_local_value(self, relation, populated):
        """Test a missing reference yields an explicit None."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")

        result = relation.populate("users", {"name": "Loner"})

        assert "guildData" in result
        assert result["guildData"] is None

    def test_list_reference(self, relation, populated):
        """Test list references keep their order and drop unmatched ids."""
        relation.bind("players", "guildIds", "guilds", "uuid", "guilds")

        result = relation.populate("players", {"guildIds": ["g3", "g404", "g1"]})

        assert [g["name"] for g in result["guilds"]] == ["Farmers", "Builders"]

    def test_first_match_wins(self, relation, storage):
        """Test duplicate target values resolve to the first record."""
        storage.save("guilds", {"uuid": "g1", "name": "First"})
        storage.save("guilds", {"uuid": "g1", "name": "Second"})
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")

        result = relation.populate("users", {"guildId": "g1"})

        assert result["guildData"]["name"] == "First"

    def test_strict_comparison(self, relation, storage):
        """Test references don't match across types."""
        storage.save("guilds", {"uuid": "1", "name": "Text"})
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")

        assert relation.populate("users", {"guildId": 1})["guildData"] is None


class TestReverse:
    """Tests for reverse relations."""

    def test_children_found(self, relation, populated):
        """Test every target pointing back is collected."""
        relation.bind_reverse("guilds", "uuid", "users", "guildId", "members")

        guild = populated.get_element_by_id("guilds", 1)
        result = relation.populate("guilds", guild)

        assert [m["name"] for m in result["members"]] == ["Steve", "Alex"]

    def test_no_children(self, relation, populated):
        relation.bind_reverse("guilds", "uuid", "users", "guildId", "members")

        result = relation.populate("guilds", {"uuid": "g3"})

        assert result["members"] == []

    def test_missing_local_value(self, relation, populated):
        """Test a missing local value yields an explicit empty list."""
        relation.bind_reverse("guilds", "uuid", "users", "guildId", "members")

        result = relation.populate("guilds", {"name": "Nameless"})

        assert "members" in result
        assert result["members"] == []

    def test_many_to_many(self, relation, storage):
        """Test targets holding a list of references match by membership."""
        storage.save("players", {"name": "Steve", "guilds": ["g1", "g2"]})
        storage.save("players", {"name": "Alex", "guilds": ["g2"]})
        storage.save("players", {"name": "Herobrine", "guilds": "g1"})
        relation.bind_reverse("guilds", "uuid", "players", "guilds", "players")

        result = relation.populate("guilds", {"uuid": "g1"})

        assert [p["name"] for p in result["players"]] == ["Steve", "Herobrine"]


class TestPopulate:
    """Tests for populate behaviour shared by both directions."""

    def test_none_input(self, relation):
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        assert relation.populate("users", None) is None

    def test_no_bindings_returns_input(self, relation):
        doc = {"name": "Steve"}
        assert relation.populate("users", doc) is doc

    def test_input_not_mutated(self, relation, populated):
        """Test the result is a copy and the input keeps its shape."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        doc = {"name": "Steve", "guildId": "g1"}
        snapshot = copy.deepcopy(doc)

        result = relation.populate("users", doc)

        assert doc == snapshot
        assert result is not doc

    def test_list_input(self, relation, populated, sample_users):
        """Test list input gives list output, element by element."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")

        results = relation.populate("users", sample_users)

        assert isinstance(results, list)
        assert [r["guildData"]["name"] for r in results] == ["Builders", "Builders", "Miners"]

    def test_list_input_with_missing_documents(self, relation, populated):
        """Test None elements of a list stay None."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        docs = [populated.get_element_by_id("users", i) for i in (1, 99)]

        results = relation.populate("users", docs)

        assert results[0]["guildData"]["name"] == "Builders"
        assert results[1] is None

    def test_outputs_do_not_share_related_documents(self, relation, populated, sample_users):
        """Test changing one hydrated document leaves the others alone."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        relation.bind_reverse("guilds", "uuid", "users", "guildId", "members")

        results = relation.populate("users", sample_users[:2])
        results[0]["guildData"]["name"] = "changed"

        assert results[1]["guildData"]["name"] == "Builders"

        guilds = relation.populate("guilds", [{"uuid": "g1"}, {"uuid": "g1"}])
        guilds[0]["members"][0]["rank"] = 99

        assert guilds[1]["members"][0]["rank"] == 1

    def test_selective_population(self, relation, populated):
        """Test only requested aliases are hydrated."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        relation.bind_reverse("users", "name", "users", "mentor", "mentees")

        result = relation.populate("users", {"name": "Steve", "guildId": "g1"}, ["guildData"])

        assert result["guildData"]["name"] == "Builders"
        assert "mentees" not in result

    def test_selective_single_alias(self, relation, populated):
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        relation.bind("users", "guildId", "guilds", "uuid", "other")

        result = relation.populate("users", {"guildId": "g2"}, "other")

        assert result["other"]["name"] == "Miners"
        assert "guildData" not in result

    def test_selective_skips_unrelated_scans(self, relation, populated, backend):
        """Test bindings that weren't requested never read their target."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        relation.bind("users", "petId", "pets", "uuid", "pet")
        populated.save("pets", {"uuid": "p1"})
        backend.enumerations.clear()

        relation.populate("users", {"guildId": "g1", "petId": "p1"}, ["guildData"])

        assert "pets" not in backend.enumerations

    def test_duplicate_alias_last_wins(self, relation, populated):
        """Test bindings sharing an alias all run, the last one decides."""
        relation.bind("users", "guildId", "guilds", "uuid", "info")
        relation.bind("users", "name", "users", "name", "info")

        result = relation.populate("users", {"name": "Alex", "guildId": "g1"})

        assert result["info"]["name"] == "Alex"
        assert result["info"]["rank"] == 2

    def test_target_read_once_per_call(self, relation, populated, backend, sample_users):
        """Test a list is hydrated with one scan of the target."""
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")
        backend.enumerations.clear()

        relation.populate("users", sample_users)

        assert backend.enumerations == {"guilds": 1}

    def test_reads_through_cache(self, storage, sample_guilds):
        """Test a relation backed by the cache sees cached writes."""
        cache = CacheManager(storage)
        relation = Relation(cache)
        for guild in sample_guilds:
            cache.save("guilds", guild)
        relation.bind("users", "guildId", "guilds", "uuid", "guildData")

        result = relation.populate("users", {"guildId": "g2"})

        assert result["guildData"] == {"uuid": "g2", "name": "Miners"}
