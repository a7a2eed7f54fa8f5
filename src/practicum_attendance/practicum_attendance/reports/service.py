from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..attendance.hours import calculate_lunch_duration
from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import LunchExclusionHoursCalculator

_ATTENDED = (AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.EXCUSED)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


@dataclass(frozen=True)
class AttendanceStats:
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    excused_days: int
    attendance_percentage: int
    current_streak: int
    longest_streak: int


def _fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else "-"


class AttendanceReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        calculator: Optional[HoursCalculator] = None,
    ):
        self._attendance = attendance
        self._calculator = calculator or LunchExclusionHoursCalculator()

    def build_hours_report(
        self,
        *,
        start: date,
        end: date,
        student_id: Optional[int] = None,
        practicum_id: Optional[int] = None,
    ) -> ReportData:
        query_rows = self._attendance.get_report_rows(
            start_date=start, end_date=end, student_id=student_id, practicum_id=practicum_id
        )

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            rec = r.record
            regular = self._calculator.regular_hours(rec)
            overtime = self._calculator.overtime_hours(rec)
            undertime = float(rec.undertime_hours or 0.0)
            lunch = calculate_lunch_duration(rec.morning_time_out, rec.afternoon_time_in)

            out_rows.append(
                {
                    "record_id": rec.record_id,
                    "student_id": rec.student_id,
                    "student_name": r.student_name,
                    "student_number": r.student_number or "",
                    "agency_name": r.agency_name or "-",
                    "work_date": rec.work_date.strftime("%Y-%m-%d"),
                    "day": rec.day,
                    "morning_in": _fmt_time(rec.morning_time_in),
                    "morning_out": _fmt_time(rec.morning_time_out),
                    "afternoon_in": _fmt_time(rec.afternoon_time_in),
                    "afternoon_out": _fmt_time(rec.afternoon_time_out),
                    "overtime_in": _fmt_time(rec.overtime_time_in),
                    "overtime_out": _fmt_time(rec.overtime_time_out),
                    "lunch_hours": lunch if lunch is not None else "",
                    "regular_hours": regular,
                    "overtime_hours": overtime,
                    "undertime_hours": undertime,
                    "status": rec.status.value,
                    "approval_status": rec.approval_status.value,
                }
            )

            s = summary_map.get(rec.student_id)
            if not s:
                s = {
                    "student_id": rec.student_id,
                    "student_name": r.student_name,
                    "total_hours": 0.0,
                    "total_undertime_hours": 0.0,
                }
                summary_map[rec.student_id] = s
            s["total_hours"] += regular + overtime
            s["total_undertime_hours"] += undertime

        summary = [
            {
                **s,
                "total_hours": round(s["total_hours"], 2),
                "total_undertime_hours": round(s["total_undertime_hours"], 2),
            }
            for s in summary_map.values()
        ]
        summary.sort(key=lambda x: x["total_hours"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)

    def build_student_stats(self, student_id: int, *, practicum_id: Optional[int] = None) -> AttendanceStats:
        records = sorted(
            self._attendance.list_for_student(student_id, practicum_id=practicum_id),
            key=lambda r: r.work_date,
        )

        total = len(records)
        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
        absent = sum(1 for r in records if r.status == AttendanceStatus.ABSENT)
        late = sum(1 for r in records if r.status == AttendanceStatus.LATE)
        excused = sum(1 for r in records if r.status == AttendanceStatus.EXCUSED)
        percentage = round((present + late + excused) / total * 100) if total else 0

        current = 0
        for r in reversed(records):
            if r.status not in _ATTENDED:
                break
            current += 1

        longest = 0
        run = 0
        for r in records:
            run = run + 1 if r.status in _ATTENDED else 0
            longest = max(longest, run)

        return AttendanceStats(
            total_days=total,
            present_days=present,
            absent_days=absent,
            late_days=late,
            excused_days=excused,
            attendance_percentage=percentage,
            current_streak=current,
            longest_streak=longest,
        )
