"""Tests for the extractive summarizer."""

import pytest

from meetnotes.extractive import (
    NO_CONTENT_SUMMARY,
    clean_sentence,
    extract_action_items,
    extract_decisions,
    extract_key_points,
    generate_summary,
    score_sentence,
    split_sentences,
    summarize,
)
from meetnotes.models import SummaryResult


SCENARIO = (
    "We decided to ship on Friday. "
    "John will update the docs by Monday. "
    "This was a great meeting overall."
)


class TestSplitSentences:
    """Test sentence segmentation."""

    def test_splits_on_terminal_punctuation(self):
        sentences = split_sentences("First sentence here. Second one is here! Is this the third?")
        assert sentences == [
            "First sentence here.",
            "Second one is here!",
            "Is this the third?",
        ]

    def test_drops_short_fragments(self):
        """Pieces of 10 characters or fewer are noise."""
        sentences = split_sentences("Okay. Sure. This sentence is long enough.")
        assert sentences == ["This sentence is long enough."]

    def test_exactly_ten_characters_dropped(self):
        assert split_sentences("abcdefghi. abcdefghij.") == ["abcdefghij."]

    def test_punctuation_without_whitespace_does_not_split(self):
        assert split_sentences("Version 2.5 shipped yesterday") == ["Version 2.5 shipped yesterday"]

    def test_empty_input(self):
        assert split_sentences("") == []

    def test_whitespace_only(self):
        assert split_sentences("   \n\t  ") == []

    def test_trims_pieces(self):
        assert split_sentences("  Leading and trailing space.   ") == ["Leading and trailing space."]

    def test_pipe_characters_are_preserved(self):
        assert split_sentences("Columns a | b | c are fine. Another sentence here.") == [
            "Columns a | b | c are fine.",
            "Another sentence here.",
        ]


class TestCleanSentence:
    """Test output cleaning."""

    def test_collapses_whitespace(self):
        assert clean_sentence("too   many\n\tspaces") == "too many spaces"

    @pytest.mark.parametrize("marker", ["-", "•", "*"])
    def test_strips_bullet_marker(self, marker):
        assert clean_sentence(f"{marker} Ship it") == "Ship it"

    def test_strips_only_one_marker(self):
        assert clean_sentence("- - nested") == "- nested"

    def test_trims(self):
        assert clean_sentence("  padded  ") == "padded"

    @pytest.mark.parametrize(
        "text",
        ["  * spaced   out  ", "plain text", "•   bullet  with  gaps"],
    )
    def test_idempotent(self, text):
        once = clean_sentence(text)
        assert clean_sentence(once) == once


class TestScoreSentence:
    """Test the importance heuristic."""

    def test_position_bonus_for_first_three(self):
        sentences = ["alpha sentence one", "beta sentence two", "gamma sentence three", "delta sentence four"]
        assert score_sentence(sentences[0], sentences) == 2
        assert score_sentence(sentences[2], sentences) == 2
        assert score_sentence(sentences[3], sentences) == 0

    def test_each_keyword_scores_two(self):
        sentences = ["pad one here", "pad two here", "pad three here", "This is critical and a priority"]
        assert score_sentence(sentences[3], sentences) == 4

    def test_keywords_match_as_substrings(self):
        """'key' matches inside 'keyboard'; 'main' inside 'remaining'."""
        sentences = ["pad one here", "pad two here", "pad three here", "the remaining keyboard"]
        assert score_sentence(sentences[3], sentences) == 4

    def test_keywords_case_insensitive(self):
        sentences = ["pad one here", "pad two here", "pad three here", "DEADLINE approaching"]
        assert score_sentence(sentences[3], sentences) == 2

    def test_length_bonus_strictly_between_10_and_40(self):
        pads = ["pad one here", "pad two here", "pad three here"]
        ten = " ".join(["word"] * 10)
        eleven = " ".join(["word"] * 11)
        forty = " ".join(["word"] * 40)
        sentences = pads + [ten, eleven, forty]
        assert score_sentence(ten, sentences) == 0
        assert score_sentence(eleven, sentences) == 1
        assert score_sentence(forty, sentences) == 0

    def test_digit_bonus(self):
        sentences = ["pad one here", "pad two here", "pad three here", "ship 3 builds"]
        assert score_sentence(sentences[3], sentences) == 1

    def test_non_ascii_digits_earn_no_bonus(self):
        sentences = ["pad one here", "pad two here", "pad three here", "ship \u0663 builds"]
        assert score_sentence(sentences[3], sentences) == 0

    def test_duplicate_uses_first_index(self):
        sentences = ["repeat me please", "b sentence", "c sentence", "d sentence", "repeat me please"]
        assert score_sentence(sentences[4], sentences) == score_sentence(sentences[0], sentences)


class TestKeyPoints:
    """Test key-point extraction."""

    def test_at_most_five(self):
        sentences = [f"Sentence number {i} is here" for i in range(12)]
        assert len(extract_key_points(sentences)) == 5

    def test_fewer_sentences_than_limit(self):
        sentences = ["Only one sentence here.", "And a second sentence."]
        assert len(extract_key_points(sentences)) == 2

    def test_ordered_by_score_not_position(self):
        sentences = [
            "Opening remarks were made.",
            "Then we chatted a while.",
            "Some more chatter followed.",
            "Filler text goes here now.",
            "The critical goal is the deadline.",
        ]
        points = extract_key_points(sentences)
        assert points[0] == "The critical goal is the deadline."

    def test_ties_keep_transcript_order(self):
        sentences = [
            "Opening remarks were made.",
            "Then we chatted a while.",
            "Some more chatter followed.",
            "Filler text goes here now.",
            "Other filler text is here.",
            "Last of the filler text.",
        ]
        assert extract_key_points(sentences) == sentences[:5]

    def test_cleans_output(self):
        assert extract_key_points(["-   Bullet   point here"]) == ["Bullet point here"]


class TestActionItems:
    """Test action-item extraction."""

    @pytest.mark.parametrize(
        "sentence",
        [
            "Sarah will prepare the slides.",
            "We are going to migrate the database.",
            "There is a task for the infra team.",
            "Mark is responsible for the release.",
            "Send it by June 5 at the latest.",
            "Could you review the pull request?",
            "Let's schedule another sync soon.",
            "We need to hire two engineers.",
        ],
    )
    def test_matches_action_language(self, sentence):
        assert extract_action_items([sentence]) == [sentence]

    def test_ignores_non_actions(self):
        assert extract_action_items(["The weather was lovely today."]) == []

    def test_word_after_verb_must_be_ascii(self):
        assert extract_action_items(["Marta will \u00e9crire le compte rendu."]) == []

    def test_transcript_order(self):
        sentences = [
            "Bob will write the tests.",
            "Nothing to see in this one.",
            "Alice should review the draft.",
        ]
        assert extract_action_items(sentences) == [
            "Bob will write the tests.",
            "Alice should review the draft.",
        ]

    def test_deduplicates_exact_matches(self):
        sentences = ["Bob will write the tests.", "Bob  will write the tests.", "Bob will write the tests."]
        assert extract_action_items(sentences) == ["Bob will write the tests."]

    def test_dedup_is_case_sensitive(self):
        sentences = ["Bob will write the tests.", "bob will write the tests."]
        assert len(extract_action_items(sentences)) == 2

    def test_capped_at_ten(self):
        sentences = [f"Person {i} will handle item {i}." for i in range(15)]
        items = extract_action_items(sentences)
        assert len(items) == 10
        assert items[0] == "Person 0 will handle item 0."
        assert items[-1] == "Person 9 will handle item 9."


class TestDecisions:
    """Test decision extraction."""

    @pytest.mark.parametrize(
        "sentence",
        [
            "The team agreed on the new design.",
            "We reached consensus on pricing.",
            "Going forward all PRs need two reviews.",
            "They opted for the cheaper vendor.",
            "The budget was approved yesterday.",
        ],
    )
    def test_matches_decision_language(self, sentence):
        assert extract_decisions([sentence]) == [sentence]

    def test_ignores_non_decisions(self):
        assert extract_decisions(["We talked about the weather."]) == []

    def test_capped_at_five(self):
        sentences = [f"We decided on option number {i}." for i in range(8)]
        decisions = extract_decisions(sentences)
        assert len(decisions) == 5
        assert decisions[0] == "We decided on option number 0."

    def test_no_duplicates(self):
        sentences = ["We decided to ship it.", "We decided to ship it."]
        assert extract_decisions(sentences) == ["We decided to ship it."]


class TestGenerateSummary:
    """Test summary assembly."""

    def test_three_or_fewer_joined_verbatim(self):
        sentences = ["-  First   sentence.", "Second sentence.", "Third sentence."]
        assert generate_summary(sentences) == "-  First   sentence. Second sentence. Third sentence."

    def test_selection_size(self):
        """ceil(30%) of 10 is 3."""
        sentences = [f"Plain sentence number {chr(97 + i)} here." for i in range(10)]
        summary = generate_summary(sentences)
        assert summary == " ".join(sentences[:3])

    def test_capped_at_five(self):
        sentences = [f"Plain sentence number {chr(97 + i)} here." for i in range(26)]
        summary = generate_summary(sentences)
        assert summary == " ".join(sentences[:5])

    def test_restores_chronological_order(self):
        sentences = [
            "Opening remarks were made.",
            "Then we chatted a while.",
            "Some more chatter followed.",
            "Filler text goes here now.",
            "The critical goal is the deadline.",
            "Wrapping up the discussion.",
            "Goodbye from everyone here.",
        ]
        # 7 sentences -> ceil(2.1) = 3 picked: the keyword sentence (6) and
        # the first two position-bonus sentences (2 each, earlier wins ties)
        assert generate_summary(sentences) == (
            "Opening remarks were made. Then we chatted a while. The critical goal is the deadline."
        )


class TestSummarize:
    """Test the top-level entrypoint."""

    @pytest.mark.parametrize("text", ["", "hi. ok. no.", "   ", "short. tiny!"])
    def test_no_content(self, text):
        result = summarize(text)
        assert result == SummaryResult(summary=NO_CONTENT_SUMMARY)
        assert result.key_points == []
        assert result.action_items == []
        assert result.decisions == []

    def test_scenario(self):
        result = summarize(SCENARIO)
        assert result.decisions == ["We decided to ship on Friday."]
        assert result.action_items == ["John will update the docs by Monday."]
        # All three tie on the position bonus, so transcript order wins
        assert result.key_points[0] == "We decided to ship on Friday."
        assert result.summary == SCENARIO

    def test_short_transcript_summary_is_concatenation(self):
        text = "The first sentence is here.   The second sentence is here."
        result = summarize(text)
        assert result.summary == "The first sentence is here. The second sentence is here."

    def test_idempotent(self):
        text = SCENARIO + " We agreed the deadline is March 3. Please send notes. " * 3
        assert summarize(text).model_dump_json() == summarize(text).model_dump_json()

    def test_limits_hold_on_long_input(self):
        text = " ".join(
            f"We decided item {i} and Bob will do task {i} because it is important." for i in range(30)
        )
        result = summarize(text)
        assert len(result.key_points) <= 5
        assert len(result.action_items) <= 10
        assert len(result.decisions) <= 5
        assert len(set(result.action_items)) == len(result.action_items)
        assert len(set(result.decisions)) == len(result.decisions)

    def test_serializes_with_camel_case_fields(self):
        data = summarize(SCENARIO).model_dump(by_alias=True)
        assert set(data) == {"summary", "keyPoints", "actionItems", "decisions"}
