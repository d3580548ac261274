from __future__ import annotations

import argparse
import tkinter as tk
import webbrowser
from concurrent.futures import ThreadPoolExecutor
from tkinter import ttk
from typing import Any, Dict, List

import customtkinter as ctk
from loguru import logger

from catalog import CatalogState, Debouncer, star_text
from data_store import JsonFileStore, MovieRepository
from models import Movie, is_poster_url, validate_movie
from poster_service import PosterLoader, PosterService
from settings import AppConfig, configure_logging, load_config

FORM_DEFAULTS: Dict[str, Any] = {"title": "", "description": "", "posterURL": "", "rating": 3}
ERROR_COLOR = "#fb7185"


class MovieShowcase:
    def __init__(
        self,
        root: ctk.CTk,
        config: AppConfig,
        state: CatalogState | None = None,
        posters: PosterService | None = None,
    ) -> None:
        self.root = root
        self.config = config
        self.root.title("Movie Showcase")
        self.root.geometry("1200x760")

        if state is None:
            repo = MovieRepository(JsonFileStore(config.data_file), key=config.storage_key)
            state = CatalogState(repo)
        self.state = state
        self.posters = posters or PosterService(config.fallback_poster_url, config.request_timeout)
        self.executor = ThreadPoolExecutor(max_workers=8)
        self.poster_loader = PosterLoader(self.posters, self.root.after, self.executor)

        self.search_debounce = Debouncer(self.root.after, self.root.after_cancel, config.debounce_ms)
        self.preview_debounce = Debouncer(self.root.after, self.root.after_cancel, config.debounce_ms)
        self.shown_movies: List[Movie] | None = None
        self.shown_columns = 0
        self.card_widgets: list[tk.Widget] = []
        self.details_window: ctk.CTkToplevel | None = None
        self.form_open = False

        self._build_ui()
        self.state.subscribe(self._on_state_change)
        self.refresh_movie_list(force=True)

    def _build_ui(self) -> None:
        outer = ctk.CTkFrame(self.root)
        outer.pack(fill="both", expand=True)

        header = ctk.CTkLabel(outer, text="🎬 Movie Showcase", font=ctk.CTkFont(size=20, weight="bold"))
        header.pack(anchor="w", padx=16, pady=(12, 0))

        toolbar = ctk.CTkFrame(outer)
        toolbar.pack(fill="x", padx=12, pady=12)

        self.search_var = tk.StringVar()
        self.search_entry = ctk.CTkEntry(toolbar, textvariable=self.search_var, width=260, placeholder_text="Search by title, e.g. Inception")
        self.search_entry.pack(side="left", padx=4)
        self.search_entry.bind("<KeyRelease>", self._on_search_change)

        self.rating_label = ctk.CTkLabel(toolbar, text="Minimum rating: 0.0")
        self.rating_label.pack(side="left", padx=(16, 4))
        self.rating_slider = ctk.CTkSlider(toolbar, from_=0, to=5, number_of_steps=10, command=self._on_min_rating_change, width=200)
        self.rating_slider.set(0)
        self.rating_slider.pack(side="left", padx=4)

        self.reset_btn = ctk.CTkButton(toolbar, text="Reset", command=self.reset_filters, width=80)
        self.reset_btn.pack(side="left", padx=4)
        self.add_toggle_btn = ctk.CTkButton(toolbar, text="Add Movie", command=self.toggle_form)
        self.add_toggle_btn.pack(side="right", padx=4)

        body = ctk.CTkFrame(outer)
        body.pack(fill="both", expand=True, padx=12, pady=6)

        self.form_frame = ctk.CTkFrame(body, width=320)
        self._build_form(self.form_frame)

        right = ctk.CTkFrame(body)
        right.pack(side="right", fill="both", expand=True)

        self.canvas = tk.Canvas(right, highlightthickness=0, background=self._canvas_color())
        self.canvas.pack(side="left", fill="both", expand=True)
        scrollbar = ttk.Scrollbar(right, orient="vertical", command=self.canvas.yview)
        scrollbar.pack(side="right", fill="y")
        self.canvas.configure(yscrollcommand=scrollbar.set)
        self.grid_frame = ctk.CTkFrame(self.canvas)
        self.canvas.create_window((0, 0), window=self.grid_frame, anchor="nw")
        self.grid_frame.bind("<Configure>", lambda _: self.canvas.configure(scrollregion=self.canvas.bbox("all")))
        self.canvas.bind("<Configure>", lambda _: self.refresh_movie_list(force=False))
        self.canvas.bind_all("<MouseWheel>", self._on_mousewheel)

        self.status = ctk.CTkLabel(outer, text="Ready")
        self.status.pack(fill="x", padx=12, pady=(0, 8))

    def _canvas_color(self) -> str:
        return "#242424" if ctk.get_appearance_mode() == "Dark" else "#ebebeb"

    def _build_form(self, parent: ctk.CTkFrame) -> None:
        ctk.CTkLabel(parent, text="Add a new movie", font=ctk.CTkFont(size=16, weight="bold")).pack(anchor="w", padx=10, pady=(10, 4))
        self.form_summary = ctk.CTkLabel(parent, text="", text_color=ERROR_COLOR, wraplength=280)
        self.form_summary.pack(fill="x", padx=10)

        self.error_labels: Dict[str, ctk.CTkLabel] = {}

        ctk.CTkLabel(parent, text="Title").pack(anchor="w", padx=10)
        self.title_entry = ctk.CTkEntry(parent, width=280)
        self.title_entry.pack(padx=10)
        self._error_label(parent, "title")

        ctk.CTkLabel(parent, text="Rating (0-5)").pack(anchor="w", padx=10)
        self.rating_entry = ctk.CTkEntry(parent, width=280)
        self.rating_entry.pack(padx=10)
        self._error_label(parent, "rating")

        ctk.CTkLabel(parent, text="Description").pack(anchor="w", padx=10)
        self.description_box = ctk.CTkTextbox(parent, width=280, height=80)
        self.description_box.pack(padx=10)
        self._error_label(parent, "description")

        ctk.CTkLabel(parent, text="Poster URL").pack(anchor="w", padx=10)
        self.poster_entry = ctk.CTkEntry(parent, width=280, placeholder_text="https://...")
        self.poster_entry.pack(padx=10)
        self._error_label(parent, "posterURL")

        self.preview_label = ctk.CTkLabel(parent, text="")

        self.form_buttons = buttons = ctk.CTkFrame(parent, fg_color="transparent")
        buttons.pack(fill="x", padx=10, pady=(4, 10))
        self.save_btn = ctk.CTkButton(buttons, text="Save Movie", command=self.submit_form, state="disabled")
        self.save_btn.pack(side="right", padx=4)
        ctk.CTkButton(buttons, text="Cancel", command=self.close_form, fg_color="transparent", border_width=1).pack(side="right", padx=4)

        for widget in (self.title_entry, self.rating_entry, self.description_box, self.poster_entry):
            widget.bind("<KeyRelease>", self._on_form_change)
        self.title_entry.bind("<Return>", lambda _: self.submit_form())
        self._reset_form()

    def _error_label(self, parent: ctk.CTkFrame, field_name: str) -> None:
        label = ctk.CTkLabel(parent, text="", text_color=ERROR_COLOR, height=16)
        label.pack(anchor="w", padx=10)
        self.error_labels[field_name] = label

    def _on_mousewheel(self, event: tk.Event) -> None:
        self.canvas.yview_scroll(int(-1 * (event.delta / 120)), "units")

    def _on_search_change(self, _event=None) -> None:
        self.search_debounce.call(self.state.set_title_filter, self.search_var.get())

    def _on_min_rating_change(self, value: float) -> None:
        self.rating_label.configure(text=f"Minimum rating: {value:.1f}")
        self.state.set_min_rating(value)

    def reset_filters(self) -> None:
        self.search_var.set("")
        self.search_debounce.call(self.state.set_title_filter, "")
        self.rating_slider.set(0)
        self._on_min_rating_change(0)

    def _on_state_change(self) -> None:
        self.refresh_movie_list(force=False)
        self._sync_details()

    def refresh_movie_list(self, force: bool = False) -> None:
        items = self.state.filtered_movies
        cols = self._grid_columns()
        if not force and items is self.shown_movies and cols == self.shown_columns:
            return
        self.shown_movies = items
        self.shown_columns = cols

        for w in self.card_widgets:
            w.destroy()
        self.card_widgets.clear()

        if not items:
            empty = ctk.CTkLabel(self.grid_frame, text="No movies match your filters.")
            empty.grid(row=0, column=0, padx=40, pady=60)
            self.card_widgets.append(empty)
        else:
            for pos, movie in enumerate(items):
                row, col = divmod(pos, cols)
                card = self._build_card(self.grid_frame, movie)
                card.grid(row=row, column=col, padx=8, pady=8, sticky="nsew")
                self.card_widgets.append(card)
            for c in range(cols):
                self.grid_frame.grid_columnconfigure(c, weight=1)

        self.status.configure(text=f"Showing {len(items)} of {len(self.state.movies)} movies")

    def _grid_columns(self) -> int:
        width = max(260, self.canvas.winfo_width())
        return max(1, width // 190)

    def _build_card(self, parent: tk.Widget, movie: Movie) -> tk.Widget:
        frame = ctk.CTkFrame(parent, corner_radius=10)
        poster_label = ctk.CTkLabel(frame, text="Loading...", width=140, height=200)
        poster_label.pack(padx=6, pady=6)
        stars = ctk.CTkLabel(frame, text=star_text(movie.rating), text_color="#fbbf24")
        stars.pack(padx=6)
        title = ctk.CTkLabel(frame, text=movie.title, width=160, wraplength=150, font=ctk.CTkFont(weight="bold"))
        title.pack(padx=6, pady=(0, 2))
        blurb = movie.description if len(movie.description) <= 90 else movie.description[:87].rstrip() + "..."
        description = ctk.CTkLabel(frame, text=blurb, width=160, wraplength=150, justify="left")
        description.pack(padx=6, pady=(0, 4))
        details = ctk.CTkButton(frame, text="Details", command=lambda m=movie: self.state.select(m))
        details.pack(fill="x", padx=6, pady=(0, 6))

        self._load_poster_async(movie.poster_url, poster_label, self.config.poster_size)
        return frame

    def _load_poster_async(self, url: str, label: ctk.CTkLabel, size: tuple[int, int]) -> None:
        if not url:
            label.configure(text="No poster")
            return

        def apply(image) -> None:
            if not label.winfo_exists():
                return
            if image is None:
                label.configure(text="Poster error")
                return
            poster = ctk.CTkImage(light_image=image, dark_image=image, size=image.size)
            label.configure(image=poster, text="")

        self.poster_loader.request(url, size, apply)

    def toggle_form(self) -> None:
        if self.form_open:
            self.close_form()
        else:
            self.form_frame.pack(side="left", fill="y", padx=(0, 8))
            self.form_open = True
            self.add_toggle_btn.configure(text="Close")

    def close_form(self) -> None:
        self.form_frame.pack_forget()
        self.form_open = False
        self.add_toggle_btn.configure(text="Add Movie")
        self._show_errors({})

    def _form_values(self) -> Dict[str, Any]:
        return {
            "title": self.title_entry.get(),
            "description": self.description_box.get("1.0", "end-1c"),
            "posterURL": self.poster_entry.get(),
            "rating": self.rating_entry.get(),
        }

    def _reset_form(self) -> None:
        self.title_entry.delete(0, tk.END)
        self.description_box.delete("1.0", tk.END)
        self.poster_entry.delete(0, tk.END)
        self.rating_entry.delete(0, tk.END)
        self.rating_entry.insert(0, str(FORM_DEFAULTS["rating"]))
        self.preview_label.pack_forget()
        self._on_form_change()

    def _on_form_change(self, _event=None) -> None:
        values = self._form_values()
        self.save_btn.configure(state="normal" if validate_movie(values).valid else "disabled")
        self.preview_debounce.call(self._update_preview, values["posterURL"].strip())

    def _update_preview(self, url: str) -> None:
        if not is_poster_url(url):
            self.poster_loader.forget("preview")
            self.preview_label.pack_forget()
            return

        def apply(image) -> None:
            if self.poster_entry.get().strip() != url:
                return
            if image is None:
                self.preview_label.pack_forget()
                return
            poster = ctk.CTkImage(light_image=image, dark_image=image, size=image.size)
            self.preview_label.configure(image=poster, text="")
            self.preview_label.pack(padx=10, pady=4, before=self.form_buttons)

        self.poster_loader.request(url, self.config.preview_size, apply, use_fallback=False, slot="preview")

    def _show_errors(self, errors: Dict[str, str]) -> None:
        for field_name, label in self.error_labels.items():
            label.configure(text=errors.get(field_name, ""))
        self.form_summary.configure(text="Please fix the errors below before saving." if errors else "")

    def submit_form(self) -> None:
        result = self.state.submit_movie(self._form_values())
        self._show_errors(result.errors)
        if not result.valid:
            return
        self._reset_form()
        self.close_form()
        self.status.configure(text=f"Added '{self.state.movies[-1].title}'")

    def _sync_details(self) -> None:
        movie = self.state.selected
        if movie is None:
            if self.details_window is not None:
                self.details_window.grab_release()
                self.details_window.destroy()
                self.details_window = None
            return
        if self.details_window is None:
            self._open_details(movie)

    def _open_details(self, movie: Movie) -> None:
        window = ctk.CTkToplevel(self.root)
        window.title(movie.title)
        window.geometry("760x420")
        window.transient(self.root)
        self.details_window = window

        poster_label = ctk.CTkLabel(window, text="Loading...", width=280, height=400)
        poster_label.pack(side="left", padx=12, pady=12)
        self._load_poster_async(movie.poster_url, poster_label, (280, 400))

        info = ctk.CTkFrame(window, fg_color="transparent")
        info.pack(side="left", fill="both", expand=True, padx=12, pady=12)
        ctk.CTkLabel(info, text=movie.title, font=ctk.CTkFont(size=22, weight="bold"), wraplength=400, justify="left").pack(anchor="w")
        ctk.CTkLabel(info, text=movie.description, wraplength=400, justify="left").pack(anchor="w", pady=(12, 0))
        ctk.CTkLabel(info, text=f"Rating  {star_text(movie.rating)}  {movie.rating:g} / 5", text_color="#fbbf24").pack(anchor="w", pady=(12, 0))

        buttons = ctk.CTkFrame(info, fg_color="transparent")
        buttons.pack(side="bottom", fill="x")
        ctk.CTkButton(buttons, text="Open Poster", command=lambda: webbrowser.open(movie.poster_url)).pack(side="right", padx=4)
        close_btn = ctk.CTkButton(buttons, text="Close", command=self.state.clear_selection, fg_color="transparent", border_width=1)
        close_btn.pack(side="right", padx=4)

        window.bind("<Escape>", lambda _: self.state.clear_selection())
        window.protocol("WM_DELETE_WINDOW", self.state.clear_selection)
        window.after(50, lambda: (window.grab_set(), close_btn.focus_set()))

    def shutdown(self) -> None:
        self.search_debounce.cancel()
        self.preview_debounce.cancel()
        self.executor.shutdown(wait=False, cancel_futures=True)
        self.root.destroy()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Browse and add movies to a local catalog.")
    parser.add_argument("--data-file", help="JSON file holding the movie store")
    parser.add_argument("--settings", default="settings.json", help="optional JSON settings file")
    args = parser.parse_args(argv)

    config = load_config(args.settings, data_file=args.data_file)
    configure_logging(config.log_level)
    logger.info(f"[Showcase] Starting with store {config.data_file}")

    ctk.set_appearance_mode(config.appearance_mode)
    ctk.set_default_color_theme(config.color_theme)
    root = ctk.CTk()
    app = MovieShowcase(root, config)
    root.protocol("WM_DELETE_WINDOW", app.shutdown)
    root.mainloop()


if __name__ == "__main__":
    main()
