"""Tests for file name and URL derivation."""

from __future__ import annotations

from examplegen.paths import ExampleFile, FileName, humanize


def test_file_name_from_title_and_category() -> None:
    assert FileName.from_string("ads", "Basic Ad") == "ads/basic_ad.html"
    assert FileName.from_string("Hello World!") == "hello_world.html"


def test_file_name_is_deterministic() -> None:
    first = FileName.from_string("User Consent", "AMP Consent & Privacy")
    second = FileName.from_string("User Consent", "AMP Consent & Privacy")
    assert first == second == "user_consent/amp_consent_privacy.html"


def test_file_name_without_title_is_none() -> None:
    assert FileName.from_string("   ") is None
    assert FileName.from_string("ads", "") is None
    assert FileName.from_string() is None


def test_distinct_titles_can_collapse_to_one_name() -> None:
    assert FileName.from_string("ads", "Basic-Ad") == FileName.from_string("ads", "basic ad")


def test_relative_path_normalisation() -> None:
    assert FileName.from_relative_path("ads/basic.html") == "ads/basic.html"
    assert FileName.from_relative_path("Ads/Basic-Ad.html") == "ads/basic_ad.html"
    assert FileName.from_relative_path("top.html") == "top.html"


def test_example_file_urls() -> None:
    example = ExampleFile.from_path("ads/basic.html")

    assert example.url() == "/ads/basic.html"
    assert example.canonical_url("https://ampbyexample.com") == "https://ampbyexample.com/ads/basic.html"
    assert example.canonical_url("https://ampbyexample.com/") == "https://ampbyexample.com/ads/basic.html"
    assert example.category_dir == "ads"


def test_example_file_preview_path() -> None:
    preview = ExampleFile("ads/basic.html").preview()

    assert preview.path == "ads/basic/preview.html"
    assert preview.url() == "/ads/basic/preview.html"
    assert ExampleFile("top.html").category_dir == ""


def test_humanize_strips_order_prefix() -> None:
    assert humanize("10_Ad_Slots") == "Ad Slots"
    assert humanize("amp-carousel") == "amp carousel"
