"""Tests for tracker.candidates module."""

from __future__ import annotations

import gc

from page_builders import FOOTER, el, group, page

from tracker.candidates import extract_candidates
from tracker.snapshot import Node, Snapshot
from tracker.status import StatusLabel


class TestExtractCandidates:
    def test_document_order(self):
        snapshot = page(
            el("Em espera", box=(0, 0, 100, 20)),
            el("Entregue", box=(0, 40, 100, 20)),
        )
        candidates = extract_candidates(snapshot)
        assert [c.node.text for c in candidates] == ["Em espera", "Entregue"]
        assert [c.label for c in candidates] == [
            StatusLabel.PENDING,
            StatusLabel.DELIVERED,
        ]

    def test_long_containers_excluded(self):
        snapshot = page(el("Entregue"))
        assert len(FOOTER) > 80
        assert [c.node.tag for c in extract_candidates(snapshot)] == ["span"]

    def test_short_containers_included(self):
        snapshot = page(group(el("12 Out"), el("Entregue"), tag="li"))
        candidates = extract_candidates(snapshot)
        assert [c.node.tag for c in candidates] == ["li", "span"]

    def test_case_insensitive(self):
        candidates = extract_candidates(page(el("ENTREGUE")))
        assert candidates[0].matched_keyword == "Entregue"

    def test_first_keyword_wins(self):
        candidates = extract_candidates(page(el("Em espera / Entregue")))
        assert len(candidates) == 1
        assert candidates[0].label is StatusLabel.DELIVERED

    def test_unaccented_variant(self):
        candidates = extract_candidates(page(el("Em transito")))
        assert candidates[0].matched_keyword == "Em transito"
        assert candidates[0].label is StatusLabel.IN_TRANSIT

    def test_textless_nodes_skipped(self):
        snapshot = page(el(""), el("Aceite"), el("Entregue"))
        assert [c.node.text for c in extract_candidates(snapshot)] == ["Entregue"]

    def test_custom_limit(self):
        snapshot = Snapshot(root=Node(text="Entregue no destino"))
        assert extract_candidates(snapshot, max_text_length=10) == []
        assert len(extract_candidates(snapshot)) == 1

    def test_text_ceiling_is_inclusive(self):
        at_limit = "Entregue " + "x" * 71
        over_limit = "Entregue " + "x" * 72
        assert (len(at_limit), len(over_limit)) == (80, 81)

        assert len(extract_candidates(page(el(at_limit)))) == 1
        assert extract_candidates(page(el(over_limit))) == []

    def test_candidates_keep_page_root(self):
        status = el("Entregue")
        row = group(el("12 Out"), status, tag="li")
        snapshot = page(row)
        root = snapshot.root
        candidates = extract_candidates(snapshot)
        assert all(c.root is root for c in candidates)

        del snapshot, row, root
        gc.collect()
        assert status.parent is not None
        assert status.parent.tag == "li"
        assert status.parent.parent.tag == "body"

    def test_empty_snapshot(self):
        assert extract_candidates(Snapshot()) == []
