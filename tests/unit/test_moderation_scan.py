from nomadnest.services.moderation_service import scan_content


def test_clean_text():
    result = scan_content("Sunrise hike over the rice terraces")
    assert not result.is_inappropriate
    assert result.reason is None


def test_keyword_is_case_insensitive():
    result = scan_content("Totally NSFW beach party")
    assert result.is_inappropriate
    assert result.reason == "Content contains prohibited term: nsfw"


def test_empty_text():
    assert not scan_content(None).is_inappropriate
    assert not scan_content("").is_inappropriate
