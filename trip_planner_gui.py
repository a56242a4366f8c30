"""
Trip Planner - Tkinter GUI

Desktop front end for the Trip API: a login screen, the trips dashboard
(search, destination filter, paging, retry) and a create / edit form.

All HTTP calls run in background threads.  Worker threads never touch Tk
widgets; they post callables to a queue that the UI thread drains every
80 ms.  The search debounce timer runs on the Tk event loop itself.

Usage:
    python trip_planner_gui.py
    TRIP_API_URL=http://api.example:3001 python trip_planner_gui.py
"""

import logging
import queue
import threading
import tkinter as tk
from collections.abc import Callable
from tkinter import ttk, messagebox

from api.models import TripOut
from client.api import ApiError, TripsClient
from client.auth import AuthContext
from client.dashboard import DashboardState, DashboardStore
from client.forms import TripForm
from utils.config import AppConfig

logger = logging.getLogger(__name__)


# ── Colour palette ────────────────────────────────────────────────────────────

BG         = "#1e1e2e"
BG_CARD    = "#282840"
FG         = "#cdd6f4"
FG_DIM     = "#6c7086"
ACCENT     = "#89b4fa"
GREEN      = "#a6e3a1"
YELLOW     = "#f9e2af"
RED        = "#f38ba8"
BORDER     = "#45475a"

ALL_DESTINATIONS = "All destinations"


def format_budget(amount: float) -> str:
    return f"₹{amount:,.0f}"


def format_days(days: int) -> str:
    return f"{days} day" if days == 1 else f"{days} days"


class _TkTask:
    def __init__(self, root: tk.Misc, after_id: str):
        self._root = root
        self._after_id = after_id

    def cancel(self) -> None:
        try:
            self._root.after_cancel(self._after_id)
        except tk.TclError:
            pass


class TkScheduler:
    """Scheduler that runs callbacks on the Tk event loop via ``after``."""

    def __init__(self, root: tk.Misc):
        self._root = root

    def call_later(self, delay: float, callback: Callable[[], None]) -> _TkTask:
        return _TkTask(self._root, self._root.after(int(delay * 1000), callback))


class TripPlannerWindow:
    """Main application window; swaps between login, dashboard and form."""

    def __init__(self, cfg: AppConfig | None = None):
        self.cfg = cfg or AppConfig.from_env()

        self.root = tk.Tk()
        self.root.title("Trip Planner")
        self.root.configure(bg=BG)
        self.root.minsize(760, 520)

        # Centre on screen
        w, h = 880, 600
        sx = self.root.winfo_screenwidth()
        sy = self.root.winfo_screenheight()
        self.root.geometry(f"{w}x{h}+{(sx-w)//2}+{(sy-h)//2}")

        # Worker threads post zero-arg callables here for the UI thread.
        self.ui_queue: queue.Queue = queue.Queue()

        self.api = TripsClient(self.cfg.api_base_url)
        self.auth = AuthContext.from_config(self.cfg)
        self.store = DashboardStore(self.api, scheduler=TkScheduler(self.root),
                                    runner=self._in_background)
        self.store.subscribe(lambda s: self.ui_queue.put(lambda: self._render(s)))

        self.form: TripForm | None = None
        self._trip_ids: dict[str, str] = {}

        self._build_style()
        self.login_frame = self._build_login()
        self.dashboard_frame = self._build_dashboard()
        self.form_frame = self._build_form()

        self.auth.init()
        if self.auth.is_authenticated:
            self._show_dashboard()
        else:
            self._show(self.login_frame)
        self._poll_queue()

    # ── Threading helpers ─────────────────────────────────────────────────

    def _in_background(self, fn: Callable[[], None]) -> None:
        threading.Thread(target=fn, daemon=True).start()

    def _poll_queue(self):
        while True:
            try:
                callback = self.ui_queue.get_nowait()
            except queue.Empty:
                break
            try:
                callback()
            except Exception:
                logger.exception("UI callback failed")
        self.root.after(80, self._poll_queue)

    # ── UI construction ───────────────────────────────────────────────────

    def _build_style(self):
        style = ttk.Style(self.root)
        style.theme_use("clam")
        style.configure("Dark.TLabel", background=BG, foreground=FG,
                         font=("Segoe UI", 10))
        style.configure("Title.TLabel", background=BG, foreground=ACCENT,
                         font=("Segoe UI", 16, "bold"))
        style.configure("Status.TLabel", background=BG, foreground=YELLOW,
                         font=("Segoe UI", 9))
        style.configure("Error.TLabel", background=BG, foreground=RED,
                         font=("Segoe UI", 9))
        style.configure("Treeview", background=BG_CARD, fieldbackground=BG_CARD,
                         foreground=FG, font=("Segoe UI", 10), rowheight=24)
        style.configure("Treeview.Heading", background=BORDER, foreground=FG,
                         font=("Segoe UI", 10, "bold"))

    def _entry(self, parent, var: tk.StringVar, show: str = "") -> tk.Entry:
        return tk.Entry(parent, textvariable=var, width=40, show=show,
                        bg=BG_CARD, fg=FG, insertbackground=FG,
                        relief="flat", font=("Segoe UI", 10))

    def _button(self, parent, text: str, command, primary: bool = False) -> tk.Button:
        if primary:
            return tk.Button(parent, text=text, bg=ACCENT, fg=BG,
                             activebackground=GREEN, font=("Segoe UI", 10, "bold"),
                             relief="flat", command=command)
        return tk.Button(parent, text=text, bg=BG_CARD, fg=FG,
                         activebackground=BORDER, font=("Segoe UI", 10),
                         relief="flat", command=command)

    def _build_login(self) -> tk.Frame:
        frame = tk.Frame(self.root, bg=BG)
        ttk.Label(frame, text="Trip Planner", style="Title.TLabel").pack(pady=(60, 4))
        ttk.Label(frame, text="Sign in to manage your trips",
                  style="Dark.TLabel").pack(pady=(0, 16))

        self.username_var = tk.StringVar()
        self.password_var = tk.StringVar()
        ttk.Label(frame, text="Username", style="Dark.TLabel").pack()
        self._entry(frame, self.username_var).pack(pady=(0, 8))
        ttk.Label(frame, text="Password", style="Dark.TLabel").pack()
        pw = self._entry(frame, self.password_var, show="*")
        pw.pack(pady=(0, 8))
        pw.bind("<Return>", lambda _e: self._login())

        self.login_error = ttk.Label(frame, text="", style="Error.TLabel")
        self.login_error.pack()
        self._button(frame, "Sign In", self._login, primary=True).pack(pady=8)
        return frame

    def _build_dashboard(self) -> tk.Frame:
        frame = tk.Frame(self.root, bg=BG)

        # ── Header ──
        header = tk.Frame(frame, bg=BG)
        header.pack(fill="x", padx=20, pady=(16, 8))
        ttk.Label(header, text="My Trips", style="Title.TLabel").pack(side="left")
        self._button(header, "Logout", self._logout).pack(side="right")
        self._button(header, "New Trip", self._new_trip, primary=True).pack(
            side="right", padx=(0, 8))

        # ── Filters ──
        filters = tk.Frame(frame, bg=BG)
        filters.pack(fill="x", padx=20, pady=(0, 8))
        self.search_var = tk.StringVar()
        self._entry(filters, self.search_var).pack(side="left")
        self.search_var.trace_add(
            "write", lambda *_: self.store.handle_search_change(self.search_var.get()))
        self.destination_var = tk.StringVar(value=ALL_DESTINATIONS)
        self.destination_box = ttk.Combobox(
            filters, textvariable=self.destination_var, state="readonly",
            values=[ALL_DESTINATIONS], width=28)
        self.destination_box.pack(side="left", padx=(10, 0))
        self.destination_box.bind("<<ComboboxSelected>>", self._on_destination)

        # ── Trip list ──
        columns = ("title", "destination", "days", "budget", "created")
        self.tree = ttk.Treeview(frame, columns=columns, show="headings", height=10)
        for col, label, width in (
            ("title", "Title", 220), ("destination", "Destination", 200),
            ("days", "Days", 80), ("budget", "Budget", 110),
            ("created", "Created", 160),
        ):
            self.tree.heading(col, text=label)
            self.tree.column(col, width=width, anchor="w")
        self.tree.pack(fill="both", expand=True, padx=20)
        self.tree.bind("<Double-1>", self._on_trip_open)

        # ── Status + pagination ──
        bottom = tk.Frame(frame, bg=BG)
        bottom.pack(fill="x", padx=20, pady=(8, 16))
        self.status_label = ttk.Label(bottom, text="", style="Status.TLabel")
        self.status_label.pack(side="left")
        self.retry_btn = self._button(bottom, "Try Again", self.store.retry)
        self.next_btn = self._button(bottom, "Next ›", lambda: self._turn_page(1))
        self.next_btn.pack(side="right")
        self.page_label = ttk.Label(bottom, text="", style="Dark.TLabel")
        self.page_label.pack(side="right", padx=8)
        self.prev_btn = self._button(bottom, "‹ Prev", lambda: self._turn_page(-1))
        self.prev_btn.pack(side="right")
        return frame

    def _build_form(self) -> tk.Frame:
        frame = tk.Frame(self.root, bg=BG)
        self.form_title = ttk.Label(frame, text="", style="Title.TLabel")
        self.form_title.pack(pady=(30, 12))

        grid = tk.Frame(frame, bg=BG)
        grid.pack()
        self.form_vars: dict[str, tk.StringVar] = {}
        self.form_errors: dict[str, ttk.Label] = {}
        for row, (name, label) in enumerate((
            ("title", "Trip Title"), ("destination", "Destination"),
            ("days", "Number of Days"), ("budget", "Budget (₹)"),
        )):
            var = tk.StringVar()
            var.trace_add("write", lambda *_, n=name: self._on_form_edit(n))
            self.form_vars[name] = var
            ttk.Label(grid, text=label, style="Dark.TLabel").grid(
                row=row * 2, column=0, sticky="w", pady=(6, 0))
            self._entry(grid, var).grid(row=row * 2, column=1, padx=(10, 0), pady=(6, 0))
            err = ttk.Label(grid, text="", style="Error.TLabel")
            err.grid(row=row * 2 + 1, column=1, sticky="w", padx=(10, 0))
            self.form_errors[name] = err

        buttons = tk.Frame(frame, bg=BG)
        buttons.pack(pady=16)
        self.submit_btn = self._button(buttons, "Submit", self._submit_form, primary=True)
        self.submit_btn.pack(side="left", padx=(0, 10))
        self._button(buttons, "Cancel", self._show_dashboard).pack(side="left")
        return frame

    def _show(self, frame: tk.Frame):
        for f in (self.login_frame, self.dashboard_frame, self.form_frame):
            f.pack_forget()
        frame.pack(fill="both", expand=True)

    # ── Auth ──────────────────────────────────────────────────────────────

    def _login(self):
        if self.auth.login(self.username_var.get(), self.password_var.get()):
            self.password_var.set("")
            self.login_error.configure(text="")
            self._show_dashboard()
        else:
            self.login_error.configure(text="Invalid username or password")

    def _logout(self):
        self.auth.logout()
        self.store.clear_debounce()
        self._show(self.login_frame)

    # ── Dashboard ─────────────────────────────────────────────────────────

    def _show_dashboard(self):
        self._show(self.dashboard_frame)
        self.store.initialize()

    def _render(self, state: DashboardState):
        self.tree.delete(*self.tree.get_children())
        self._trip_ids.clear()
        for trip in state.trips:
            item = self.tree.insert("", "end", values=(
                trip.title, trip.destination, format_days(trip.days),
                format_budget(trip.budget),
                trip.created_at.strftime("%Y-%m-%d %H:%M"),
            ))
            self._trip_ids[item] = trip.id

        self.destination_box.configure(values=[ALL_DESTINATIONS, *state.destinations])

        if state.error:
            self.status_label.configure(text=state.error, style="Error.TLabel")
            self.retry_btn.pack(side="left", padx=(10, 0))
        else:
            self.retry_btn.pack_forget()
            if state.is_searching:
                text = "Searching..."
            elif state.is_loading:
                text = "Loading trips..."
            elif not state.trips:
                text = "No trips found"
            else:
                text = ""
            self.status_label.configure(text=text, style="Status.TLabel")

        pages = max(state.total_pages, 1)
        self.page_label.configure(text=f"Page {state.current_page} of {pages}")
        self.prev_btn.configure(state="normal" if state.current_page > 1 else "disabled")
        self.next_btn.configure(
            state="normal" if state.current_page < state.total_pages else "disabled")

    def _turn_page(self, step: int):
        self.store.handle_page_change(self.store.state.current_page + step)

    def _on_destination(self, _event=None):
        value = self.destination_var.get()
        self.store.handle_destination_change("" if value == ALL_DESTINATIONS else value)

    def _on_trip_open(self, _event=None):
        selected = self.tree.focus()
        trip_id = self._trip_ids.get(selected)
        if not trip_id:
            return

        def load():
            try:
                trip = self.api.get_trip(trip_id)
            except ApiError as e:
                msg = e.message
                self.ui_queue.put(lambda: messagebox.showerror("Error", msg))
                return
            self.ui_queue.put(lambda: self._open_form(TripForm.for_trip(trip)))

        self._in_background(load)

    # ── Form ──────────────────────────────────────────────────────────────

    def _new_trip(self):
        self._open_form(TripForm())

    def _open_form(self, form: TripForm):
        self.form = None
        for name, var in self.form_vars.items():
            value = getattr(form, name)
            if name == "budget" and isinstance(value, float) and value.is_integer():
                value = int(value)
            var.set(str(value))
        for err in self.form_errors.values():
            err.configure(text="")
        self.form = form
        self.form_title.configure(text="Edit Trip" if form.is_editing else "Plan a New Trip")
        self.submit_btn.configure(text="Update Trip" if form.is_editing else "Create Trip")
        self._refresh_submit()
        self._show(self.form_frame)

    def _on_form_edit(self, name: str):
        if self.form is None:
            return
        setattr(self.form, name, self.form_vars[name].get())
        self.form_errors[name].configure(text="")
        self._refresh_submit()

    def _refresh_submit(self):
        ok = self.form is not None and self.form.is_submittable()
        self.submit_btn.configure(state="normal" if ok else "disabled")

    def _submit_form(self):
        form = self.form
        if form is None:
            return
        errors = form.validate()
        for name, err in self.form_errors.items():
            err.configure(text=errors.get(name, ""))
        if errors:
            return
        payload = form.to_payload()
        self.submit_btn.configure(state="disabled", text="Submitting...")

        def save():
            try:
                if form.initial is not None:
                    trip = self.api.update_trip(form.initial.id, payload)
                else:
                    trip = self.api.create_trip(payload)
            except ApiError as e:
                err = e
                self.ui_queue.put(lambda: self._on_save_failed(err))
                return
            self.ui_queue.put(lambda: self._on_saved(trip))

        self._in_background(save)

    def _on_saved(self, trip: TripOut):
        logger.info("Saved trip %s", trip.id)
        self.form = None
        self._show_dashboard()

    def _on_save_failed(self, error: ApiError):
        messagebox.showerror("Could not save trip", error.message)
        if self.form is not None:
            self._open_form(self.form)

    # ── Close handling ────────────────────────────────────────────────────

    def _on_close(self):
        self.store.close()
        self.api.close()
        self.root.destroy()

    def run(self):
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)
        self.root.mainloop()


def main():
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = TripPlannerWindow()
    app.run()


if __name__ == "__main__":
    main()
