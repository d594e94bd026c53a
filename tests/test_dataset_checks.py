"""Uniqueness, composite keys and cross-schema foreign keys"""
import copy
import pytest

from lectern import process_records, process_schemas
from lectern.config import EngineConfig
from lectern.records import find_duplicate_keys, find_missing_foreign_keys, key_component, select_fields_from_dataset
from conftest import errors_of

def _donors(*ids):
    return [
        {"program_id": "PACA-AU", "submitter_donor_id": d, "gender": "Male",
         "ethnicity": "asian", "vital_status": "alive"}
        for d in ids
    ]


class TestUnique:

    def test_first_occurrence_is_exempt(self, dictionary):
        result = process_records(dictionary, "specimen", [
            {"submitter_specimen_id": "sp1"},
            {"submitter_specimen_id": "sp1"},
            {"submitter_specimen_id": "sp2"},
        ])
        assert errors_of(result) == [{
            "errorType": "INVALID_BY_UNIQUE",
            "fieldName": "submitter_specimen_id",
            "index": 1,
            "info": {"value": "sp1"},
            "message": "Value for submitter_specimen_id must be unique.",
        }]

    def test_policy_all_flags_every_row(self, dictionary):
        result = process_records(dictionary, "specimen", [
            {"submitter_specimen_id": "sp1"},
            {"submitter_specimen_id": "sp2"},
            {"submitter_specimen_id": "sp1"},
        ], config=EngineConfig(duplicate_policy="all"))
        assert [e["index"] for e in errors_of(result, "INVALID_BY_UNIQUE")] == [0, 2]

    def test_single_occurrence_never_flagged(self, dictionary):
        result = process_records(dictionary, "specimen", [
            {"submitter_specimen_id": "sp1"},
            {"submitter_specimen_id": "sp2"},
        ])
        assert errors_of(result, "INVALID_BY_UNIQUE") == []

    def test_blank_values_are_not_duplicates(self, dictionary):
        result = process_records(dictionary, "specimen", [
            {"submitter_specimen_id": ""},
            {"submitter_specimen_id": ""},
        ])
        assert errors_of(result, "INVALID_BY_UNIQUE") == []
        assert len(errors_of(result, "MISSING_REQUIRED_FIELD")) == 2


class TestUniqueKey:

    def test_composite_duplicate(self, dictionary):
        result = process_records(dictionary, "sample", [
            {"submitter_specimen_id": "sp1", "submitter_sample_id": "s1"},
            {"submitter_specimen_id": "sp1", "submitter_sample_id": "s1"},
            {"submitter_specimen_id": "sp1", "submitter_sample_id": "s2"},
        ])
        assert errors_of(result) == [{
            "errorType": "INVALID_BY_UNIQUE_KEY",
            "fieldName": "submitter_specimen_id, submitter_sample_id",
            "index": 1,
            "info": {
                "value": {"submitter_specimen_id": "sp1", "submitter_sample_id": "s1"},
                "uniqueKeyFields": ["submitter_specimen_id", "submitter_sample_id"],
            },
            "message": "Key submitter_specimen_id: sp1, submitter_sample_id: s1 must be unique.",
        }]

    def test_partial_key_match_is_not_duplicate(self, dictionary):
        result = process_records(dictionary, "sample", [
            {"submitter_specimen_id": "sp1", "submitter_sample_id": "s1", "lane": "1"},
            {"submitter_specimen_id": "sp2", "submitter_sample_id": "s1", "lane": "1"},
        ])
        assert result.validation_errors == []


class TestForeignKeys:

    def test_missing_reference(self, dictionary):
        results = process_schemas(dictionary, {
            "donor": _donors("ICGC_1"),
            "specimen": [
                {"submitter_specimen_id": "sp1", "submitter_donor_id": "ICGC_1"},
                {"submitter_specimen_id": "sp2", "submitter_donor_id": "ICGC_9"},
                {"submitter_specimen_id": "sp3", "submitter_donor_id": ""},
                {"submitter_specimen_id": "sp4"},
            ],
        })
        assert results["donor"].validation_errors == []
        assert errors_of(results["specimen"]) == [{
            "errorType": "INVALID_BY_FOREIGN_KEY",
            "fieldName": "submitter_donor_id",
            "index": 1,
            "info": {"value": {"submitter_donor_id": "ICGC_9"}, "foreignSchema": "donor"},
            "message": (
                "Record violates foreign key restriction defined for field(s) submitter_donor_id. "
                "Key submitter_donor_id: ICGC_9 is not present in schema donor."
            ),
        }]

    def test_schema_level_definition(self, dictionary):
        results = process_schemas(dictionary, {
            "specimen": [{"submitter_specimen_id": "sp1"}],
            "sample": [
                {"submitter_specimen_id": "sp1", "submitter_sample_id": "s1"},
                {"submitter_specimen_id": "sp7", "submitter_sample_id": "s2"},
            ],
        })
        fk = errors_of(results["sample"], "INVALID_BY_FOREIGN_KEY")
        assert [(e["index"], e["info"]["foreignSchema"]) for e in fk] == [(1, "specimen")]

    def test_absent_dataset_counts_as_empty(self, dictionary):
        results = process_schemas(dictionary, {
            "specimen": [
                {"submitter_specimen_id": "sp1", "submitter_donor_id": "ICGC_1"},
                {"submitter_specimen_id": "sp2", "submitter_donor_id": " "},
            ],
        })
        assert [e["index"] for e in errors_of(results["specimen"], "INVALID_BY_FOREIGN_KEY")] == [0]

    def test_record_and_dataset_errors_are_merged(self, dictionary):
        results = process_schemas(dictionary, {
            "donor": _donors("ICGC_1"),
            "specimen": [
                {"submitter_specimen_id": "sp1", "submitter_donor_id": "ICGC_1", "percent_tumour": "x"},
                {"submitter_specimen_id": "sp1", "submitter_donor_id": "ICGC_2"},
            ],
        })
        kinds = [e["errorType"] for e in errors_of(results["specimen"])]
        assert kinds == ["INVALID_FIELD_VALUE_TYPE", "INVALID_BY_UNIQUE", "INVALID_BY_FOREIGN_KEY"]

    def test_unknown_dataset_name(self, dictionary):
        from lectern.errors import SchemaNotFoundError
        with pytest.raises(SchemaNotFoundError):
            process_schemas(dictionary, {"nope": []})


class TestInputsUntouched:

    def test_process_schemas_leaves_caller_data_alone(self, dictionary):
        datasets = {
            "donor": _donors("ICGC_1"),
            "specimen": [
                {"submitter_specimen_id": "sp1", "submitter_donor_id": "ICGC_1", "percent_tumour": 5},
                {"submitter_specimen_id": "sp1", "submitter_donor_id": "ICGC_9"},
            ],
            "measurement": [
                {"sample_id": "S1", "units": "", "tags": ["", " "]},
                {"sample_id": "S2", "tags": ""},
            ],
        }
        before = copy.deepcopy(datasets)
        schemas_before = copy.deepcopy(dictionary.schemas)
        results = process_schemas(dictionary, datasets)
        assert datasets == before
        assert dictionary.schemas == schemas_before
        assert results["measurement"].processed_records[0]["units"] == "mg"
        assert results["measurement"].processed_records[1]["tags"] == ("untagged",)
        assert [e["errorType"] for e in errors_of(results["specimen"])] == [
            "INVALID_BY_UNIQUE", "INVALID_BY_FOREIGN_KEY",
        ]


class TestRecords:

    @pytest.mark.parametrize("a,b", [
        (None, ""),
        ("  ", ""),
        (10.0, "10"),
        (10, "10"),
        (True, "true"),
        ((None, ""), ""),
    ])
    def test_key_components_compare_by_text(self, a, b):
        assert key_component(a) == key_component(b)

    def test_select_fields_projects_blank_for_absent(self):
        rows = select_fields_from_dataset([{"a": "1"}, {"b": "2"}], ["a"])
        assert rows == [(0, {"a": "1"}), (1, {"a": ""})]

    def test_duplicates_sorted_by_index(self):
        rows = [(0, {"k": "x"}), (1, {"k": "y"}), (2, {"k": "x"}), (3, {"k": "y"})]
        assert [i for i, _ in find_duplicate_keys(rows, ["k"])] == [2, 3]
        assert [i for i, _ in find_duplicate_keys(rows, ["k"], "all")] == [0, 1, 2, 3]

    def test_missing_foreign_keys_with_renamed_fields(self):
        local = [(0, {"donor": 1}), (1, {"donor": 2})]
        foreign = [(0, {"id": "1"})]
        missing = find_missing_foreign_keys(local, foreign, [("donor", "id")])
        assert missing == [(1, {"donor": 2})]
