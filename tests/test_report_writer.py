# tests/test_report_writer.py
import csv
import io
from collections import Counter
from datetime import date

from lambdas.log_summary.aggregator import aggregate_rows
from lambdas.log_summary.models import LogRow, SourceAggregate, TopMessageEntry
from lambdas.log_summary.report_writer import (
    artifact_names,
    input_prefix,
    render_hourly_summary,
    render_top_messages,
    top_messages,
)


def test_top_messages_keeps_ten_highest():
    """
    15 distinct warnings counted 15..1: the table holds counts 15 down to 6.
    """
    frequency = Counter({f"warning {i}": i for i in range(1, 16)})

    top = top_messages(frequency)
    text = render_top_messages(top)
    lines = text.splitlines()

    assert len(top) == 10
    assert [entry.count for entry in top] == list(range(15, 5, -1))
    assert lines[0] == "Message,Count"
    assert len(lines) == 11
    assert lines[1] == '"warning 15",15'
    assert lines[-1] == '"warning 6",6'


def test_top_messages_returns_all_when_fewer_than_ten():
    top = top_messages({"a": 1, "b": 3, "c": 2})

    assert top == [TopMessageEntry("b", 3), TopMessageEntry("c", 2), TopMessageEntry("a", 1)]


def test_top_messages_breaks_ties_by_message_text():
    top = top_messages({"zeta": 2, "alpha": 2, "mid": 5, "beta": 2})

    assert [entry.message for entry in top] == ["mid", "alpha", "beta", "zeta"]


def test_top_messages_of_empty_table():
    assert top_messages({}) == []
    assert render_top_messages([]) == "Message,Count\n"


def test_hourly_summary_scenario():
    """
    Two warnings at hour 3 and one error at hour 10 for source 'api'.
    """
    aggregate = aggregate_rows([
        LogRow("2026-10-18T03:00:00Z", 2, "api", "w1"),
        LogRow("2026-10-18T03:30:00Z", 2, "api", "w2"),
        LogRow("2026-10-18T10:00:00Z", 3, "api", "e1"),
    ])["api"]

    lines = render_hourly_summary(aggregate).splitlines()

    assert lines[0] == "Hour,Warnings,Errors"
    assert len(lines) == 25
    assert lines[1 + 3] == "3,2,0"
    assert lines[1 + 10] == "10,0,1"
    for hour in set(range(24)) - {3, 10}:
        assert lines[1 + hour] == f"{hour},0,0"


def test_hourly_summary_reads_back_as_24_ascending_triples():
    aggregate = SourceAggregate(source="api")
    for hour in range(24):
        aggregate.hourly_warnings[hour] = hour * 2
        aggregate.hourly_errors[hour] = 24 - hour

    reader = csv.DictReader(io.StringIO(render_hourly_summary(aggregate)))
    triples = [(int(r["Hour"]), int(r["Warnings"]), int(r["Errors"])) for r in reader]

    assert triples == aggregate.hourly_rows()


def test_messages_with_quotes_and_commas_are_escaped():
    entries = [
        TopMessageEntry('User "bob" not found', 4),
        TopMessageEntry("Timeout, retrying", 2),
    ]

    text = render_top_messages(entries)

    assert text.splitlines()[1] == '"User ""bob"" not found",4'
    assert text.splitlines()[2] == '"Timeout, retrying",2'
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[1:] == [['User "bob" not found', "4"], ["Timeout, retrying", "2"]]


def test_artifact_names_are_bit_exact():
    names = artifact_names("output/", date(2026, 3, 7), "api-gateway")

    assert names.summary == "output/2026-03-07_api-gateway_summary.csv"
    assert names.warnings == "output/2026-03-07_api-gateway_warnings.csv"
    assert names.errors == "output/2026-03-07_api-gateway_errors.csv"


def test_input_prefix():
    assert input_prefix("logs/", date(2026, 3, 7)) == "logs/2026-03-07_"
    assert input_prefix("", date(2026, 12, 31)) == "2026-12-31_"
