"""
Tests for the log formatter and logging mixin.
"""

import logging

from utils.logger import ExtraFieldsFormatter, LoggerMixin


def make_record(**extra):
    record = logging.LogRecord("booking", logging.INFO, __file__, 1, "예약 제출 완료", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_extra_fields():
    formatter = ExtraFieldsFormatter("%(message)s")

    assert formatter.format(make_record(intent="create", booking_id="bk_1")) == (
        "예약 제출 완료 [booking_id=bk_1 intent=create]"
    )


def test_formatter_without_extra_fields():
    assert ExtraFieldsFormatter("%(levelname)s %(message)s").format(make_record()) == "INFO 예약 제출 완료"


def test_mixin_passes_fields_as_extra(caplog):
    class Service(LoggerMixin):
        pass

    with caplog.at_level(logging.INFO):
        Service().log_info("팀 멤버 검색 완료", query="Jane")

    record = caplog.records[-1]
    assert record.getMessage() == "팀 멤버 검색 완료"
    assert record.query == "Jane"
    assert record.name.endswith("Service")
