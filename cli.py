import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from salat.jobs.reminders import ThreadedReminderScheduler
from salat.services.errors import PrayerTimesError, UnknownMethod
from salat.services.methods import list_methods, lookup_method
from salat.services.orchestrators.daily_full import build_viewmodel, schedule_day_reminders
from salat.services.preferences import JsonFileStore, Preferences
from salat.services.reminders import NotificationSettings, Reminder

DEFAULT_PREFS = Path.home() / ".config" / "salat" / "preferences.json"


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Print the daily prayer view model as JSON.")
    p.add_argument("--lat", type=float, help="Latitude; defaults to the saved location")
    p.add_argument("--lon", type=float, help="Longitude; defaults to the saved location")
    p.add_argument("--tz", help="IANA timezone; inferred from coordinates when omitted")
    p.add_argument("--date", help="YYYY-MM-DD; defaults to today at the place")
    p.add_argument("--method", help="Calculation method; defaults to the saved method")
    p.add_argument("--asr-method", help="Standard or Hanafi")
    p.add_argument("--high-latitude-rule", help="None, MidnightFraction, SeventhOfNight or AngleBased")
    p.add_argument("--list-methods", action="store_true", help="List calculation methods and exit")
    p.add_argument("--set-method", metavar="NAME", help="Save the default calculation method")
    p.add_argument("--set-location", action="store_true", help="Save --lat/--lon as the default location")
    p.add_argument("--label", help="Place label used with --set-location")
    p.add_argument("--set-reminder-minutes", type=int, metavar="N", help="Save the reminder lead time in minutes")
    p.add_argument(
        "--schedule-reminders",
        action="store_true",
        help="Announce the day's remaining prayers using the saved notification settings",
    )
    p.add_argument("--prefs", default=os.getenv("SALAT_PREFS", str(DEFAULT_PREFS)), help="Preferences file")
    return p


def _announce(reminder: Reminder) -> None:
    print(f"[{reminder.when.isoformat()}] {reminder.message}", flush=True)


def _run_reminders(prefs: Preferences, date_str, place, options) -> int:
    scheduler = ThreadedReminderScheduler(_announce)
    ids = schedule_day_reminders(scheduler, date_str, place, options, prefs.notification_settings())
    print(f"Scheduled {len(ids)} reminders", flush=True)
    try:
        while scheduler.pending():
            time.sleep(1)
    except KeyboardInterrupt:
        scheduler.cancel_all()
    return 0


def main(argv=None) -> int:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))
    args = _parser().parse_args(argv)
    prefs = Preferences(JsonFileStore(args.prefs))

    if args.list_methods:
        print(json.dumps(list_methods(), indent=2))
        return 0

    if args.set_method:
        try:
            params = lookup_method(args.set_method)
        except UnknownMethod as exc:
            print(str(exc), file=sys.stderr)
            return 2
        prefs.save_prayer_method(params.key)
        print(f"Saved method → {params.key}")
        return 0

    if args.set_reminder_minutes is not None:
        if args.set_reminder_minutes < 0:
            print("--set-reminder-minutes must be >= 0", file=sys.stderr)
            return 2
        current = prefs.notification_settings().to_dict()
        current["reminder_minutes"] = args.set_reminder_minutes
        prefs.save_notification_settings(NotificationSettings.from_dict(current))
        print(f"Saved reminder lead time → {args.set_reminder_minutes} min")
        return 0

    if args.set_location:
        if args.lat is None or args.lon is None:
            print("--set-location needs --lat and --lon", file=sys.stderr)
            return 2
        prefs.save_user_location(args.lat, args.lon, args.label)
        print(f"Saved location → {args.lat}, {args.lon}")
        return 0

    place = {}
    saved = prefs.user_location()
    if args.lat is not None and args.lon is not None:
        place = {"lat": args.lat, "lon": args.lon}
    elif saved:
        place = {"lat": saved["latitude"], "lon": saved["longitude"], "label": saved.get("name")}
    if args.tz:
        place["tz"] = args.tz

    options = {
        "method": args.method or prefs.prayer_method(),
        "asr_method": args.asr_method,
        "high_latitude_rule": args.high_latitude_rule,
    }
    if args.schedule_reminders:
        try:
            return _run_reminders(prefs, args.date, place or None, options)
        except (PrayerTimesError, ValueError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1

    try:
        vm = build_viewmodel(args.date, place or None, options)
    except (PrayerTimesError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    payload = vm.model_dump()
    prefs.save_last_prayer_times({"date": payload["header"]["date_local"], "times": payload["times"]})
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
