# tests/test_localized.py
import pytest

from models.content_card import ContentCard
from models.localized import Bilingual, as_bilingual, text_for


def test_text_for_plain_string_ignores_language():
    assert text_for("Новини", "en") == "Новини"
    assert text_for("Новини", None) == "Новини"


def test_text_for_missing_value_is_empty():
    assert text_for(None, "ua") == ""


def test_text_for_prefers_secondary_only_for_english():
    value = Bilingual(ua="Ректорат", en="Rectorate")

    assert text_for(value, "en") == "Rectorate"
    assert text_for(value, "en-GB") == "Rectorate"
    assert text_for(value, "ua") == "Ректорат"
    assert text_for(value, None) == "Ректорат"


def test_text_for_falls_back_to_primary_without_translation():
    assert text_for(Bilingual(ua="Ректорат"), "en") == "Ректорат"
    assert text_for(Bilingual(ua="Ректорат", en=""), "en") == "Ректорат"


def test_text_for_accepts_raw_dict():
    assert text_for({"ua": "Так", "en": "Yes"}, "en") == "Yes"


def test_as_bilingual_coerces_every_variant():
    assert as_bilingual(None) == Bilingual()
    assert as_bilingual("текст") == Bilingual(ua="текст")
    assert as_bilingual({"ua": "а", "en": "a"}) == Bilingual(ua="а", en="a")

    existing = Bilingual(ua="б")
    assert as_bilingual(existing) is existing


def test_as_bilingual_rejects_other_types():
    with pytest.raises(TypeError):
        as_bilingual(42)


def test_with_primary_keeps_translation():
    value = Bilingual(ua="старе", en="old")
    assert value.with_primary("нове") == Bilingual(ua="нове", en="old")


def test_card_accepts_plain_strings_for_localized_fields():
    card = ContentCard(id="x", category="news", title="Заголовок", content={"ua": "Текст", "en": "Text"})

    assert card.title == Bilingual(ua="Заголовок")
    assert card.render("en")["content"] == "Text"
    assert card.render("ua")["title"] == "Заголовок"


def test_card_blank_resource_means_manual():
    card = ContentCard(id="x", category="faculties", resource="   ")

    assert card.resource is None
    assert card.is_manual
    assert not card.is_submenu
