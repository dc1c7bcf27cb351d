"""Unit tests for dav/models.py — DavResponse, DavEntry and DavListing."""

from webdav_fs.dav.models import DavEntry, DavListing, DavResponse

# ---------------------------------------------------------------------------
# DavResponse
# ---------------------------------------------------------------------------


class TestDavResponse:
    def test_ok_covers_2xx_only(self) -> None:
        assert DavResponse(200).ok is True
        assert DavResponse(207).ok is True
        assert DavResponse(299).ok is True
        assert DavResponse(301).ok is False
        assert DavResponse(403).ok is False

    def test_created_and_overwritten(self) -> None:
        assert DavResponse(201).created is True
        assert DavResponse(201).overwritten is False
        assert DavResponse(204).overwritten is True
        assert DavResponse(204).created is False

    def test_neutral_carries_only_status(self) -> None:
        response = DavResponse.neutral(423)
        assert response.status_code == 423
        assert response.headers == {}
        assert response.body == b""

    def test_default_headers_are_not_shared(self) -> None:
        a = DavResponse(200)
        b = DavResponse(200)
        a.headers["X"] = "1"
        assert b.headers == {}


# ---------------------------------------------------------------------------
# DavListing
# ---------------------------------------------------------------------------


def _listing() -> DavListing:
    return DavListing(
        folder_path="/docs/",
        entries=[
            DavEntry(
                name="a.txt", is_folder=False, size=3, modified=100, content_type="text/plain"
            ),
            DavEntry(name="reports", is_folder=True),
            DavEntry(name="b.pdf", is_folder=False, size=0),
        ],
    )


class TestDavListing:
    def test_splits_files_and_folders(self) -> None:
        listing = _listing()
        assert [e.name for e in listing.files] == ["a.txt", "b.pdf"]
        assert [e.name for e in listing.folders] == ["reports"]

    def test_find_by_name(self) -> None:
        listing = _listing()
        found = listing.find("a.txt")
        assert found is not None
        assert found.size == 3
        assert listing.find("missing") is None

    def test_not_degraded_by_default(self) -> None:
        assert DavListing(folder_path="/").degraded is False

    def test_from_dict_restores_entries(self) -> None:
        restored = DavListing.from_dict(_listing().to_dict())
        assert restored == _listing()

    def test_degraded_flag_is_not_serialized(self) -> None:
        data = DavListing(folder_path="/x/", degraded=True).to_dict()
        assert "degraded" not in data
        assert DavListing.from_dict(data).degraded is False

    def test_from_dict_tolerates_missing_optional_fields(self) -> None:
        listing = DavListing.from_dict(
            {"folder_path": "/", "entries": [{"name": "n", "is_folder": 0}]}
        )
        entry = listing.entries[0]
        assert entry == DavEntry(name="n", is_folder=False, size=0, modified=0, content_type="")
