"""Tests for lead transformation."""

from lead_sync.core.transformer import RecordTransformer, first_present


class TestRecordTransformer:
    """Tests for RecordTransformer."""

    def test_canonical_fields(self) -> None:
        record = RecordTransformer().transform(
            {
                "id": "lead-1",
                "email": "ana@acme.io",
                "first_name": "Ana",
                "last_name": "Silva",
                "company_name": "Acme",
                "title": "VP Sales",
                "linkedin_url": "https://linkedin.com/in/ana",
                "list_id": "L1",
            },
            list_id="L-unit",
        )

        assert record is not None
        assert record.to_payload() == {
            "email": "ana@acme.io",
            "first_name": "Ana",
            "last_name": "Silva",
            "company_name": "Acme",
            "title": "VP Sales",
            "linkedin_url": "https://linkedin.com/in/ana",
            "custom_variables": {
                "list_id": "L1",
                "lead_id": "lead-1",
                "source": "amplemarket",
            },
        }

    def test_alias_fallbacks(self) -> None:
        record = RecordTransformer().transform(
            {
                "work_email": "bo@acme.io",
                "firstName": "Bo",
                "lastName": "Li",
                "organization": "Acme",
                "job_title": "CTO",
                "social_url": "https://x.com/bo",
            }
        )

        assert record is not None
        assert record.email == "bo@acme.io"
        assert record.first_name == "Bo"
        assert record.last_name == "Li"
        assert record.company_name == "Acme"
        assert record.title == "CTO"
        assert record.linkedin_url == "https://x.com/bo"

    def test_first_non_empty_alias_wins(self) -> None:
        record = RecordTransformer().transform(
            {"email": "", "work_email": "work@acme.io", "company": "A", "company_name": "B"}
        )

        assert record is not None
        assert record.email == "work@acme.io"
        assert record.company_name == "A"

    def test_unknown_fields_are_empty_strings(self) -> None:
        record = RecordTransformer().transform({"email": "a@b.c"})

        assert record is not None
        assert record.first_name == ""
        assert record.linkedin_url == ""
        assert record.custom_variables.lead_id == ""

    def test_rejected_without_any_email(self) -> None:
        transformer = RecordTransformer()
        assert transformer.transform({"first_name": "No", "email": None}) is None
        assert transformer.transform({"email": "", "work_email": ""}) is None

    def test_list_id_falls_back_to_unit(self) -> None:
        record = RecordTransformer().transform({"email": "a@b.c"}, list_id="L7")
        assert record.custom_variables.list_id == "L7"

    def test_non_scalar_values_count_as_empty(self) -> None:
        record = RecordTransformer().transform(
            {"email": "a@b.c", "company": {"name": "Acme"}, "company_name": "Acme Inc"}
        )
        assert record.company_name == "Acme Inc"

    def test_transform_all_counts_rejections(self) -> None:
        result = RecordTransformer().transform_all(
            [{"email": "a@b.c"}, {"first_name": "x"}, "not a lead", {"work_email": "d@e.f"}],
            list_id="L1",
        )

        assert len(result.records) == 2
        assert result.rejected == 2
        assert result.received == 4

    def test_first_present_numbers(self) -> None:
        assert first_present({"id": 12}, ("id",)) == "12"
        assert first_present({"flag": True}, ("flag",)) == ""
