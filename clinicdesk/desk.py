#!/usr/bin/env python3
"""
ClinicDesk interactive menu

Front-desk prompt loop over the scheduling service: patient registration and
removal, patient listings, and the appointment book. All decisions are taken by
SchedulingLogic; this module only asks, calls, and renders.
"""

import argparse
import sys
from typing import Callable, Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from .config import configure_logging, load_settings
from .scheduling.formats import format_clinic_date
from .scheduling.logic import SchedulingLogic
from .scheduling.models import Appointment, Patient, PatientSortKey

MAIN_MENU = [
    ("1", "Patient registry"),
    ("2", "Agenda"),
    ("3", "Quit"),
]

PATIENT_MENU = [
    ("1", "Register new patient"),
    ("2", "Remove patient"),
    ("3", "List patients by identifier"),
    ("4", "List patients by name"),
    ("5", "Back to main menu"),
]

AGENDA_MENU = [
    ("1", "Book appointment"),
    ("2", "Cancel appointment"),
    ("3", "List agenda for a period"),
    ("4", "List full agenda"),
    ("5", "Back to main menu"),
]


class ClinicDesk:
    def __init__(self, scheduler: Optional[SchedulingLogic] = None,
                 console: Optional[Console] = None,
                 ask: Optional[Callable[[str], str]] = None):
        self.scheduler = scheduler or SchedulingLogic()
        self.console = console or Console()
        self.ask = ask or (lambda text: Prompt.ask(text, console=self.console))

    def _show_menu(self, title: str, options: Iterable) -> str:
        body = "\n".join(f"{key}. {label}" for key, label in options)
        self.console.print(Panel(body, title=title, border_style="blue"))
        return self.ask("Select an option").strip()

    def run(self) -> None:
        """Main loop; returns when the operator chooses to quit."""
        while True:
            choice = self._show_menu("Clinic Desk", MAIN_MENU)
            if choice == "1":
                self.patient_menu()
            elif choice == "2":
                self.agenda_menu()
            elif choice == "3":
                self.console.print("Leaving the clinic desk...")
                return
            else:
                self.console.print("[red]Invalid option. Try again.[/red]")

    def patient_menu(self) -> None:
        actions = {
            "1": self.register_patient,
            "2": self.remove_patient,
            "3": lambda: self.show_patients(PatientSortKey.ID),
            "4": lambda: self.show_patients(PatientSortKey.NAME),
        }
        while True:
            choice = self._show_menu("Patient registry", PATIENT_MENU)
            if choice == "5":
                return
            action = actions.get(choice)
            if action is None:
                self.console.print("[red]Invalid option. Try again.[/red]")
                continue
            action()

    def agenda_menu(self) -> None:
        actions = {
            "1": self.book_appointment,
            "2": self.cancel_appointment,
            "3": self.show_agenda_period,
            "4": self.show_full_agenda,
        }
        while True:
            choice = self._show_menu("Agenda", AGENDA_MENU)
            if choice == "5":
                return
            action = actions.get(choice)
            if action is None:
                self.console.print("[red]Invalid option. Try again.[/red]")
                continue
            action()

    # Patient registry

    def register_patient(self) -> None:
        patient_id = self.ask("Patient identifier (11 digits)")
        name = self.ask("Patient name")
        birth_date = self.ask("Birth date (DD/MM/YYYY)")

        result = self.scheduler.register_patient(patient_id, name, birth_date)
        if result.ok:
            self.console.print(f"[green]Patient {result.patient.id} registered successfully![/green]")
        else:
            self.console.print(f"[red]{result.error.message}[/red]")

    def remove_patient(self) -> None:
        patient_id = self.ask("Identifier of the patient to remove")

        result = self.scheduler.remove_patient(patient_id)
        if result.removed:
            self.console.print(f"[green]Patient {result.patient.id} removed successfully![/green]")
        else:
            self.console.print(f"[red]{result.error.message}[/red]")

    def show_patients(self, sort_key: PatientSortKey) -> None:
        patients = self.scheduler.list_patients(sort_key)
        if not patients:
            self.console.print("[yellow]No patients registered.[/yellow]")
            return
        self.console.print(self._patients_table(patients, sort_key))

    def _patients_table(self, patients: Iterable[Patient], sort_key: PatientSortKey) -> Table:
        by_name = sort_key is PatientSortKey.NAME
        table = Table(title="Patients by name" if by_name else "Patients by identifier")
        columns = ["Name", "Identifier"] if by_name else ["Identifier", "Name"]
        for column in columns:
            table.add_column(column, style="cyan" if column == "Identifier" else "white", no_wrap=True)
        table.add_column("Birth date", style="yellow")

        for patient in patients:
            row = [patient.name, patient.id] if by_name else [patient.id, patient.name]
            table.add_row(*row, format_clinic_date(patient.birth_date))
        return table

    # Agenda

    def book_appointment(self) -> None:
        patient_id = self.ask("Patient identifier")
        appointment_date = self.ask("Appointment date (DD/MM/YYYY)")
        start_time = self.ask("Start time (HHMM)")
        end_time = self.ask("End time (HHMM)")

        result = self.scheduler.book_appointment(patient_id, appointment_date, start_time, end_time)
        if result.ok:
            self.console.print(f"[green]{result.message}[/green] ({result.duration} minutes)")
        else:
            self.console.print(f"[red]{result.message}[/red]")

    def cancel_appointment(self) -> None:
        patient_id = self.ask("Identifier of the patient whose appointment to cancel")

        if self.scheduler.cancel_appointment(patient_id):
            self.console.print("[green]Appointment cancelled successfully![/green]")
        else:
            self.console.print("[red]Unknown identifier or patient has no future appointment.[/red]")

    def show_agenda_period(self) -> None:
        date_from = self.ask("Start date (DD/MM/YYYY)")
        date_to = self.ask("End date (DD/MM/YYYY)")

        result = self.scheduler.list_appointments(date_from, date_to)
        if not result.ok:
            self.console.print(f"[red]{result.error.message}[/red]")
            return
        self._print_agenda(result.appointments)

    def show_full_agenda(self) -> None:
        self._print_agenda(self.scheduler.list_appointments().appointments)

    def _print_agenda(self, appointments: Iterable[Appointment]) -> None:
        appointments = list(appointments)
        if not appointments:
            self.console.print("[yellow]No appointments scheduled.[/yellow]")
            return

        table = Table(title="Agenda")
        table.add_column("Identifier", style="cyan", no_wrap=True)
        table.add_column("Date", style="yellow")
        table.add_column("Time", style="green")
        table.add_column("Minutes", justify="right")

        for appt in appointments:
            table.add_row(
                appt.patient_id,
                format_clinic_date(appt.date),
                f"{appt.start_time.strftime('%H:%M')} - {appt.end_time.strftime('%H:%M')}",
                str(appt.duration),
            )
        self.console.print(table)


def main(argv=None) -> int:
    """Run the interactive desk."""
    parser = argparse.ArgumentParser(description="Clinic appointment desk")
    parser.add_argument("--env-file", help="Path to a .env file with clinic settings")
    args = parser.parse_args(argv)

    settings = load_settings(args.env_file)
    configure_logging(settings)

    desk = ClinicDesk(SchedulingLogic(settings=settings))
    try:
        desk.run()
    except (KeyboardInterrupt, EOFError):
        desk.console.print("\n[yellow]Desk interrupted by operator[/yellow]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
