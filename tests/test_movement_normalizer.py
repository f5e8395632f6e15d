"""Unit tests for the movement alias lexicon."""
import json

from whiteboard_ingestor.config import settings
from whiteboard_ingestor.services.movement_normalizer import MovementLexicon


class TestNormalize:

    def test_aliases(self, tiny_lexicon):
        assert tiny_lexicon.normalize("du") == "Double Unders"
        assert tiny_lexicon.normalize("DUs") == "Double Unders"
        assert tiny_lexicon.normalize("ski:") == "Ski"
        assert tiny_lexicon.normalize("  WB. ") == "Wall Ball"

    def test_unknown_name_title_cased(self, tiny_lexicon):
        assert tiny_lexicon.normalize("air-squat") == "Air Squat"
        assert tiny_lexicon.normalize("KB swings") == "Kb Swings"

    def test_blank(self, tiny_lexicon):
        assert tiny_lexicon.normalize("") == ""
        assert tiny_lexicon.normalize("   ") == ""

    def test_bundled_shorthand(self, default_lexicon):
        assert default_lexicon.normalize("t2b") == "Toes-to-Bar"
        assert default_lexicon.normalize("hspu") == "Handstand Push-up"
        assert default_lexicon.normalize("burpees") == "Burpee"
        assert default_lexicon.normalize("cal row") == "Row"


class TestLookup:

    def test_later_entries_win(self):
        lexicon = MovementLexicon({"Burpee Over Bar": ["burpee"], "Burpee": ["burpees"]})
        assert lexicon.lookup("burpee") == "Burpee"
        assert lexicon.lookup("Burpee Over Bar") == "Burpee Over Bar"

    def test_missing(self, tiny_lexicon):
        assert tiny_lexicon.lookup("thruster") is None

    def test_container_protocol(self, tiny_lexicon):
        assert len(tiny_lexicon) == 5
        assert "Ski" in tiny_lexicon
        assert "ski" not in tiny_lexicon
        assert tiny_lexicon.aliases_for("Ski") == ["ski", "ski erg"]
        assert tiny_lexicon.aliases_for("Row") == []


class TestFuzzyMatching:

    def test_find_closest(self, tiny_lexicon):
        assert tiny_lexicon.find_closest("wall bal") == "Wall Ball"
        assert tiny_lexicon.find_closest("box jumpz") == "Box Jump"
        assert tiny_lexicon.find_closest("zzz") is None
        assert tiny_lexicon.find_closest("") is None

    def test_validate_known(self, tiny_lexicon):
        match = tiny_lexicon.validate("double under")
        assert match.is_valid
        assert match.normalized == "Double Unders"

    def test_validate_unknown(self, tiny_lexicon):
        match = tiny_lexicon.validate("Zorbflap")
        assert not match.is_valid
        assert match.normalized == "Zorbflap"
        assert match.original == "Zorbflap"

    def test_validate_blank(self, tiny_lexicon):
        assert not tiny_lexicon.validate("").is_valid


class TestLoading:

    def test_from_file(self, tmp_path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({
            "version": "2.0.0",
            "movements": {"Sled Push": ["sled", "prowler"]},
        }))
        lexicon = MovementLexicon.from_file(path)
        assert lexicon.version == "2.0.0"
        assert lexicon.normalize("prowler") == "Sled Push"

    def test_default_is_cached(self, default_lexicon):
        assert MovementLexicon.default() is default_lexicon
        assert len(default_lexicon) > 100
        assert "Double Unders" in default_lexicon

    def test_unreadable_aliases_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(MovementLexicon, "_default_cache", None)
        monkeypatch.setattr(settings, "ALIASES_PATH", str(tmp_path / "missing.json"))

        lexicon = MovementLexicon.default()
        assert len(lexicon) == 0
        assert lexicon.normalize("du") == "Du"
        assert MovementLexicon._default_cache is None
