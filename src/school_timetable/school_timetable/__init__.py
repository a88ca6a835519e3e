"""School Timetable package.

Organized by feature modules (schedules, attendance, dashboard, ...) with a
thin Flask controller layer over service/repository layers.
"""
