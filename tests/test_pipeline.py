"""Tests for the fix pipeline and the individual fixes."""

from __future__ import annotations

from pathlib import Path

import pytest

from seoforge.catalog import get_rule
from seoforge.classifier import audit_document
from seoforge.config import FixConfig
from seoforge.detector import detect, has_concrete_markup
from seoforge.fixes.head import HeadInsertionFix, ViewportFix
from seoforge.models import Document, FixKey, RuleKey, Tier
from seoforge.pipeline import apply_fixes, registered_fixes, remediate
from tests.fixtures.generate import (
    A_ONLY_PAGE,
    BLADE_LAYOUT,
    FULL_PAGE,
    MINIMAL_HTML,
    PARTIAL_VIEW,
    make_doc,
)

ALL_KEYS = list(FixKey)


class TestRegistry:
    def test_every_fix_key_registered(self) -> None:
        assert set(registered_fixes()) == set(FixKey)


class TestEndToEnd:
    def test_minimal_document(self, minimal_doc: Document) -> None:
        keys = [FixKey.VIEWPORT, FixKey.CANONICAL, FixKey.LANGUAGE]
        outcome = apply_fixes(minimal_doc, keys)

        assert outcome.changed is True
        assert outcome.fixes_applied == 3
        fixed = make_doc(outcome.new_text)
        for key in ("viewport", "canonical", "language"):
            assert detect(fixed, get_rule(key)) is True

        report = audit_document(fixed, Tier.A)
        assert [f.rule_key for f in report.findings] == [
            RuleKey.TITLE,
            RuleKey.META_DESCRIPTION,
        ]

    def test_original_document_untouched(self, minimal_doc: Document) -> None:
        outcome = apply_fixes(minimal_doc, ALL_KEYS)
        assert minimal_doc.raw_text == MINIMAL_HTML
        assert outcome.original_text == MINIMAL_HTML


class TestIdempotence:
    @pytest.mark.parametrize(
        "text", [MINIMAL_HTML, FULL_PAGE, BLADE_LAYOUT, A_ONLY_PAGE, PARTIAL_VIEW]
    )
    def test_second_pass_changes_nothing(self, text: str) -> None:
        first = apply_fixes(make_doc(text), ALL_KEYS)
        second = apply_fixes(make_doc(first.new_text), ALL_KEYS)
        assert second.changed is False
        assert second.fixes_applied == 0
        assert second.new_text == first.new_text

    def test_duplicate_key_in_one_pass(self, minimal_doc: Document) -> None:
        outcome = apply_fixes(minimal_doc, [FixKey.VIEWPORT, FixKey.VIEWPORT])
        assert outcome.fixes_applied == 1
        assert outcome.new_text.count('name="viewport"') == 1

    def test_full_page_needs_nothing(self, full_doc: Document) -> None:
        outcome = apply_fixes(full_doc, ALL_KEYS)
        assert outcome.changed is False


class TestHeadInsertion:
    def test_inserted_after_head_keeping_attributes(self) -> None:
        doc = make_doc('<html><head profile="x">\n<title>t</title></head></html>')
        outcome = apply_fixes(doc, [FixKey.META_ROBOTS])
        assert outcome.new_text == (
            '<html><head profile="x">\n'
            '    <meta name="robots" content="index, follow">\n'
            "<title>t</title></head></html>"
        )

    def test_header_is_not_an_anchor(self) -> None:
        doc = make_doc("<html><body><header>x</header></body></html>")
        outcome = apply_fixes(doc, [FixKey.VIEWPORT])
        assert outcome.changed is False
        assert outcome.fixes_applied == 0
        assert outcome.warnings == ["[viewport] No <head> tag found; nothing inserted"]

    def test_only_first_head_used(self) -> None:
        doc = make_doc("<head></head><template><head></head></template>")
        outcome = apply_fixes(doc, [FixKey.FAVICON])
        assert outcome.new_text.count('rel="icon"') == 1
        assert outcome.new_text.startswith('<head>\n    <link rel="icon"')

    def test_placeholder_only_still_gets_concrete_markup(self, blade_doc: Document) -> None:
        assert detect(blade_doc, get_rule("canonical")) is True
        outcome = apply_fixes(blade_doc, [FixKey.CANONICAL])
        assert outcome.fixes_applied == 1
        assert has_concrete_markup(outcome.new_text, RuleKey.CANONICAL) is True

    @pytest.mark.parametrize(
        "fix_cls", [c for c in registered_fixes().values() if issubclass(c, HeadInsertionFix)]
    )
    def test_snippets_come_from_templates(self, fix_cls: type[HeadInsertionFix]) -> None:
        snippets = fix_cls(FixConfig(site_url="https://a.test")).snippets()
        assert len(snippets) == len(fix_cls.templates)
        assert all("{site_url}" not in s for s in snippets)

    def test_preconnect_inserts_both_links(self, minimal_doc: Document) -> None:
        settings = FixConfig(site_url="https://example.com")
        outcome = apply_fixes(minimal_doc, [FixKey.PRECONNECT], settings)
        assert outcome.fixes_applied == 1
        assert '<link rel="preconnect" href="https://example.com">' in outcome.new_text
        assert '<link rel="dns-prefetch" href="https://example.com">' in outcome.new_text

    def test_site_url_is_escaped(self, minimal_doc: Document) -> None:
        settings = FixConfig(site_url='https://x.test/?a=1&b="2"')
        outcome = apply_fixes(minimal_doc, [FixKey.CANONICAL], settings)
        assert 'href="https://x.test/?a=1&amp;b=&quot;2&quot;"' in outcome.new_text

    @pytest.mark.parametrize(
        "key, rule",
        [
            (FixKey.VIEWPORT, "viewport"),
            (FixKey.META_ROBOTS, "meta_robots"),
            (FixKey.CANONICAL, "canonical"),
            (FixKey.FAVICON, "favicon"),
            (FixKey.PRECONNECT, "preconnect"),
            (FixKey.APPLE_TOUCH_ICON, "apple_touch_icon"),
        ],
    )
    def test_fix_satisfies_rule(self, minimal_doc: Document, key: FixKey, rule: str) -> None:
        outcome = apply_fixes(minimal_doc, [key])
        assert detect(make_doc(outcome.new_text), get_rule(rule)) is True


class TestLanguageFix:
    def test_adds_lang_keeping_attributes(self) -> None:
        doc = make_doc('<html data-theme="dark"><head></head></html>')
        outcome = apply_fixes(doc, [FixKey.LANGUAGE], FixConfig(language="fr"))
        assert outcome.new_text == '<html lang="fr" data-theme="dark"><head></head></html>'

    def test_existing_lang_untouched(self, blade_doc: Document) -> None:
        outcome = apply_fixes(blade_doc, [FixKey.LANGUAGE])
        assert outcome.changed is False

    def test_no_html_tag(self) -> None:
        outcome = apply_fixes(make_doc(PARTIAL_VIEW), [FixKey.LANGUAGE])
        assert outcome.changed is False
        assert outcome.step_results[0].warnings


class TestMissingAltFix:
    def test_fixes_only_offending_images(self) -> None:
        doc = make_doc('<img src="a.png" alt="x"><img src="b.png">')
        assert detect(doc, get_rule("image_alt")) is False

        outcome = apply_fixes(doc, [FixKey.MISSING_ALT])
        assert outcome.new_text == '<img src="a.png" alt="x"><img src="b.png" alt="Image">'
        assert outcome.fixes_applied == 1
        assert detect(make_doc(outcome.new_text), get_rule("image_alt")) is True

    def test_counts_every_image(self) -> None:
        doc = make_doc('<img src="1"><p></p><img src="2"><img src="3" alt="ok">')
        outcome = apply_fixes(doc, [FixKey.MISSING_ALT])
        assert outcome.fixes_applied == 2

    def test_self_closing(self) -> None:
        outcome = apply_fixes(make_doc('<img src="c.png" />'), [FixKey.MISSING_ALT])
        assert outcome.new_text == '<img src="c.png" alt="Image" />'

    def test_empty_alt_value_replaced(self) -> None:
        outcome = apply_fixes(make_doc('<img alt="" src="d.png">'), [FixKey.MISSING_ALT])
        assert outcome.new_text == '<img alt="Image" src="d.png">'

    def test_custom_alt_text(self) -> None:
        settings = FixConfig(alt_text="Decorative")
        outcome = apply_fixes(make_doc('<img src="e.png">'), [FixKey.MISSING_ALT], settings)
        assert 'alt="Decorative"' in outcome.new_text

    def test_template_expression_with_arrow_left_alone(self) -> None:
        text = '<img src="{{ $user->avatar }}" alt="Avatar">'
        outcome = apply_fixes(make_doc(text), [FixKey.MISSING_ALT])
        assert outcome.changed is False
        assert outcome.new_text == text

    @pytest.mark.parametrize(
        "before, after",
        [
            (
                '<img src="{{ $user->avatar }}"><p>x</p>',
                '<img src="{{ $user->avatar }}" alt="Image"><p>x</p>',
            ),
            (
                "<img src={{ $user->avatar }}>",
                '<img src={{ $user->avatar }} alt="Image">',
            ),
            (
                '<img src="{!! $post->cover() !!}"/>',
                '<img src="{!! $post->cover() !!}" alt="Image" />',
            ),
        ],
    )
    def test_alt_added_after_template_expression(self, before: str, after: str) -> None:
        outcome = apply_fixes(make_doc(before), [FixKey.MISSING_ALT])
        assert outcome.new_text == after
        assert outcome.fixes_applied == 1

    def test_bare_alt_replaced(self) -> None:
        outcome = apply_fixes(make_doc('<img src="a.png" alt>'), [FixKey.MISSING_ALT])
        assert outcome.new_text == '<img src="a.png" alt="Image">'
        assert outcome.fixes_applied == 1


class TestKeyHandling:
    def test_unknown_keys_skipped(self, minimal_doc: Document) -> None:
        outcome = apply_fixes(minimal_doc, ["bogus", "viewport", "og_title"])
        assert [r.fix_key for r in outcome.step_results] == [FixKey.VIEWPORT]
        assert outcome.fixes_applied == 1

    def test_string_keys_accepted(self, minimal_doc: Document) -> None:
        outcome = apply_fixes(minimal_doc, ["language"])
        assert outcome.new_text.startswith('<html lang="en">')

    def test_order_of_application(self, minimal_doc: Document) -> None:
        outcome = apply_fixes(minimal_doc, [FixKey.VIEWPORT, FixKey.CANONICAL])
        # Each insertion goes directly after <head>, so the later one comes first
        assert outcome.new_text.index('rel="canonical"') < outcome.new_text.index('name="viewport"')

    def test_failing_fix_does_not_stop_others(
        self, minimal_doc: Document, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(self, text):  # type: ignore[no-untyped-def]
            raise RuntimeError("kaboom")

        monkeypatch.setattr(ViewportFix, "apply", boom)
        outcome = apply_fixes(minimal_doc, [FixKey.VIEWPORT, FixKey.LANGUAGE])

        failed, ok = outcome.step_results
        assert failed.success is False
        assert failed.error == "kaboom"
        assert ok.success is True
        assert outcome.fixes_applied == 1
        assert outcome.all_succeeded is False


class _RecordingSinks:
    def __init__(self, fail_backup: bool = False, fail_write: bool = False) -> None:
        self.calls: list[tuple[str, Path]] = []
        self.backups: dict[Path, bytes] = {}
        self.written: dict[Path, str] = {}
        self.fail_backup = fail_backup
        self.fail_write = fail_write

    def save_backup(self, path: Path, original: bytes) -> Path:
        self.calls.append(("backup", path))
        if self.fail_backup:
            raise OSError("disk full")
        self.backups[path] = original
        return Path("/backups") / path.name

    def write_document(self, path: Path, text: str) -> None:
        self.calls.append(("write", path))
        if self.fail_write:
            raise PermissionError("read-only")
        self.written[path] = text


class TestRemediate:
    def test_backup_before_write(self, minimal_doc: Document) -> None:
        sinks = _RecordingSinks()
        outcome = remediate(minimal_doc, [FixKey.VIEWPORT], writer=sinks, backup=sinks)

        assert sinks.calls == [("backup", minimal_doc.path), ("write", minimal_doc.path)]
        assert sinks.backups[minimal_doc.path] == MINIMAL_HTML.encode("utf-8")
        assert sinks.written[minimal_doc.path] == outcome.new_text
        assert outcome.backup_path == Path("/backups/minimal.html")
        assert outcome.error is None

    def test_without_backup(self, minimal_doc: Document) -> None:
        sinks = _RecordingSinks()
        remediate(minimal_doc, [FixKey.VIEWPORT], writer=sinks)
        assert sinks.calls == [("write", minimal_doc.path)]

    def test_unchanged_touches_no_sink(self, full_doc: Document) -> None:
        sinks = _RecordingSinks()
        outcome = remediate(full_doc, list(FixKey), writer=sinks, backup=sinks)
        assert outcome.changed is False
        assert sinks.calls == []

    def test_backup_failure_prevents_write(self, minimal_doc: Document) -> None:
        sinks = _RecordingSinks(fail_backup=True)
        outcome = remediate(minimal_doc, [FixKey.VIEWPORT], writer=sinks, backup=sinks)
        assert sinks.calls == [("backup", minimal_doc.path)]
        assert outcome.error == "disk full"
        assert outcome.all_succeeded is False

    def test_write_failure_reported_once(self, minimal_doc: Document) -> None:
        sinks = _RecordingSinks(fail_write=True)
        outcome = remediate(minimal_doc, list(FixKey), writer=sinks, backup=sinks)
        assert outcome.error == "read-only"
        assert all(r.success for r in outcome.step_results)
