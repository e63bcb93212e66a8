"""Tests for the AI Comment scanner/classifier."""

import pytest

from ai_comments.scanner import classify_payload, scan_annotations, scan_text
from ai_comments.types import EXTRA_SPACE, MISSING_SPACE, Annotation, Operator
from ai_comments.wrappers import BLOCK, HTML, SLASH


class TestClassifyPayload:
    @pytest.mark.parametrize("char,op", [
        ("?", Operator.RATIONALE),
        ("~", Operator.RULE),
        (">", Operator.INSTRUCTION),
        (":", Operator.COMPLETED),
    ])
    def test_operator_with_single_space(self, char, op):
        assert classify_payload(f" {char} Keep it short ") == (op, "Keep it short", None)

    def test_no_operator_is_intent(self):
        assert classify_payload("  Parse and validate raw input  ") == (
            Operator.NONE, "Parse and validate raw input", None,
        )

    def test_unknown_leading_char_stays_in_payload(self):
        assert classify_payload(" !important thing ") == (Operator.NONE, "!important thing", None)
        assert classify_payload(" * bullet ") == (Operator.NONE, "* bullet", None)

    def test_missing_space_is_tolerated_and_flagged(self):
        assert classify_payload(" >Do this ") == (Operator.INSTRUCTION, "Do this", MISSING_SPACE)

    def test_extra_space_is_flagged(self):
        assert classify_payload(" ~   Must hold ") == (Operator.RULE, "Must hold", EXTRA_SPACE)
        assert classify_payload(" ?\tBecause ") == (Operator.RATIONALE, "Because", EXTRA_SPACE)

    def test_empty_payload(self):
        assert classify_payload(" ") == (Operator.NONE, "", None)
        assert classify_payload("") == (Operator.NONE, "", None)

    def test_bare_operator(self):
        assert classify_payload(" > ") == (Operator.INSTRUCTION, "", None)


class TestScanText:
    def test_rule_example(self):
        anns = scan_annotations("/*[ ~ Must return cached value when key is unchanged ]*/")
        assert len(anns) == 1
        a = anns[0]
        assert a.operator is Operator.RULE
        assert a.category == "rule"
        assert a.text == "Must return cached value when key is unchanged"
        assert a.kind == "block"
        assert a.fix is None

    def test_missing_space_example(self):
        [a] = scan_annotations("/*[ >Do this ]*/")
        assert a.operator is Operator.INSTRUCTION
        assert a.text == "Do this"
        assert a.needs_normalization
        assert a.fix == MISSING_SPACE

    def test_line_comment_example(self):
        [a] = scan_annotations("//[ Parse and validate raw input ]")
        assert a.operator is Operator.NONE
        assert a.text == "Parse and validate raw input"
        assert a.kind == "line"
        assert a.wrapper == "slash"

    def test_empty_block(self):
        [a] = scan_annotations("/*[ ]*/")
        assert a.operator is Operator.NONE
        assert a.text == ""

    def test_no_matches_is_empty(self):
        assert scan_annotations("const x = 1; // plain comment\n/* block */\n") == []
        assert scan_annotations("") == []

    def test_all_line_markers(self):
        src = "#[ py intent ]\n-- [ not this ]\n--[ ~ sql rule ]\n;[ > lisp todo ]\n"
        anns = scan_annotations(src)
        assert [(a.wrapper, a.operator, a.text) for a in anns] == [
            ("hash", Operator.NONE, "py intent"),
            ("dash", Operator.RULE, "sql rule"),
            ("semi", Operator.INSTRUCTION, "lisp todo"),
        ]

    def test_document_order_and_locations(self):
        src = (
            "/*[ Header ]*/\n"
            "\n"
            "function f() {\n"
            "  //[ ? why ]\n"
            "  /*[ ~ multi\n"
            "     line rule ]*/\n"
            "}\n"
        )
        anns = scan_annotations(src)
        assert [a.text for a in anns] == ["Header", "why", "multi\n     line rule"]
        assert [(a.line, a.column) for a in anns] == [(1, 1), (4, 3), (5, 3)]
        assert anns[2].end_line == 6
        assert src[anns[1].offset:anns[1].end_offset] == anns[1].raw == "//[ ? why ]"

    def test_block_spans_lines(self):
        [a] = scan_annotations("/*[\n  > Add a rename command.\n]*/")
        assert a.operator is Operator.INSTRUCTION
        assert a.text == "Add a rename command."

    def test_nested_wrapper_not_reparsed(self):
        src = "/*[ ~ Never write //[ x ] inline ]*/"
        anns = scan_annotations(src)
        assert len(anns) == 1
        assert anns[0].text == "Never write //[ x ] inline"

    def test_unterminated_block_yields_nothing(self):
        assert scan_annotations("/*[ ~ never closed\nconst x = 1;\n") == []

    def test_malformed_block_not_stitched_to_next(self):
        src = "/*[ broken */\nconst a = 1;\n/*[ ~ real ]*/\n"
        anns = scan_annotations(src)
        assert [(a.operator, a.text, a.line) for a in anns] == [(Operator.RULE, "real", 3)]

    def test_line_wrapper_needs_closing_bracket_at_end_of_line(self):
        assert scan_annotations("//[ unterminated\n") == []
        assert scan_annotations("//[ a ] trailing code\n") == []

    def test_line_wrapper_keeps_inner_brackets(self):
        [a] = scan_annotations("x = 1  #[ ~ keep arr[0] stable ]  \n")
        assert a.text == "keep arr[0] stable"

    def test_line_wrapper_must_follow_whitespace(self):
        assert scan_annotations("url = 'http://[::1]'\n") == []

    def test_crlf_line_endings(self):
        anns = scan_annotations("//[ one ]\r\n//[ two ]\r\n")
        assert [a.text for a in anns] == ["one", "two"]
        assert [a.line for a in anns] == [1, 2]

    def test_custom_wrappers(self):
        src = "<!--[ > Document the flag. ]-->\n//[ ignored ]\n"
        anns = scan_annotations(src, [HTML])
        assert [(a.wrapper, a.text) for a in anns] == [("html", "Document the flag.")]

    def test_restricting_wrappers(self):
        src = "/*[ a ]*/\n//[ b ]\n"
        assert [a.text for a in scan_annotations(src, [SLASH])] == ["b"]
        assert [a.text for a in scan_annotations(src, [BLOCK])] == ["a"]

    def test_scan_is_lazy_and_restartable(self):
        src = "/*[ one ]*/ /*[ two ]*/"
        it = scan_text(src)
        assert next(it).text == "one"
        assert [a.text for a in scan_text(src)] == ["one", "two"]
        assert [a.text for a in it] == ["two"]

    def test_never_raises_on_odd_input(self):
        for src in ["/*[", "]*/", "/*[ ]*", "//[", "#[]", "\x00/*[\x00]*/", "/*[ : ]*/" * 3]:
            assert isinstance(scan_annotations(src), list)


class TestAnnotation:
    def test_equality_ignores_location_and_fix(self):
        a = Annotation(wrapper="block", kind="block", operator=Operator.RULE, text="x", line=3, fix=MISSING_SPACE)
        b = Annotation(wrapper="block", kind="block", operator=Operator.RULE, text="x", line=9)
        assert a == b

    def test_dict_round_trip(self):
        [a] = scan_annotations("\n  /*[ ? because ]*/")
        d = a.to_dict()
        assert d["operator"] == "?"
        assert d["category"] == "rationale"
        back = Annotation.from_dict(d)
        assert back == a
        assert (back.line, back.column, back.raw) == (2, 3, "/*[ ? because ]*/")
