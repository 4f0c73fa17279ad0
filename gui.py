# gui.py
import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import cv2
from PIL import Image, ImageTk

import tkinter as tk

from board import CellState
from session import TutorSession
from settings import (
    DEFAULT_DEPTH,
    DIFFICULTIES,
    MAX_DEPTH,
    MIN_DEPTH,
    BoardConfig,
    TutorMode,
    TutorSettings,
    sanitize_depth,
)
from tutor.advisor import Advice, CellTag
from tutor.probability import Available

log = logging.getLogger(__name__)

CELL_SIZE = 28
BOARD_BORDER = 2
CANVAS_BG = "black"
CELL_CLOSED = "#b0b0b0"
CELL_OPEN = "#dcdcdc"
CELL_EXPLODED = "#e04a3a"
FLAG_GLYPH = "\U0001F6A9"
MINE_GLYPH = "\U0001F4A3"
POLL_MS = 30

NUMBER_COLORS = {
    1: "#0b24fb",
    2: "#0f7b0f",
    3: "#e00b0b",
    4: "#0b0b76",
    5: "#6e0909",
    6: "#0b7676",
    7: "#000000",
    8: "#4d4d4d",
}

HIGHLIGHT_COLORS = {
    CellTag.REVEAL: "#2fbf4f",
    CellTag.FLAG: "#f5733c",
    CellTag.CHORD: "#2f8fdf",
    CellTag.GUESS: "#d9c02b",
}

ASSETS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets")


class VideoPopup(tk.Toplevel):
    def __init__(self, master, video_path: str, title: str = "Video"):
        super().__init__(master)
        self.title(title)
        self.configure(bg="black")
        self.cap = cv2.VideoCapture(video_path)
        if not self.cap.isOpened():
            log.warning("cannot open video %s", video_path)
            tk.Label(self, text=title, fg="white", bg="black").pack(padx=10, pady=10)
            return
        self.label = tk.Label(self, bg="black")
        self.label.pack()
        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self._playing = True
        self._play_next_frame()

    def _play_next_frame(self):
        if not self._playing:
            return
        ret, frame = self.cap.read()
        if not ret:
            # loop video
            self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
            ret, frame = self.cap.read()
            if not ret:
                return
        frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        img = Image.fromarray(frame)
        imgtk = ImageTk.PhotoImage(image=img)
        self.label.configure(image=imgtk)
        self.label.image = imgtk
        self.after(33, self._play_next_frame)  # ~30 fps

    def on_close(self):
        self._playing = False
        if self.cap:
            self.cap.release()
        self.destroy()


class TutorUI(tk.Tk):
    def __init__(self) -> None:
        super().__init__()
        self.title("Minesweeper Efficiency Tutor")
        self.configure(bg="#1a1a1a")

        self.executor = ThreadPoolExecutor(max_workers=1)
        self.pending: Optional[Future] = None

        preset = DIFFICULTIES["beginner"]
        self.rows_var = tk.StringVar(value=str(preset.rows))
        self.cols_var = tk.StringVar(value=str(preset.cols))
        self.mines_var = tk.StringVar(value=str(preset.mines))
        self.mode_var = tk.StringVar(value=TutorMode.CLASSIC.value)
        self.depth_var = tk.StringVar(value=str(DEFAULT_DEPTH))
        self.heatmap_var = tk.BooleanVar(value=False)
        self.status_var = tk.StringVar(value="")
        self.banner_var = tk.StringVar(value="")

        self.session = TutorSession(
            preset,
            TutorSettings(mode=TutorMode.CLASSIC, depth=DEFAULT_DEPTH),
            probability_source=Available(),
            auto_refresh=False,
        )
        self._game_over_shown = False
        self._flash = {}

        self._build_controls()
        self._build_canvas()
        self.protocol("WM_DELETE_WINDOW", self.on_close)
        self.new_game()

    # UI setup
    def _build_controls(self) -> None:
        top = tk.Frame(self, bg="#1a1a1a")
        top.pack(side=tk.TOP, fill=tk.X, padx=8, pady=6)

        for key, preset in DIFFICULTIES.items():
            tk.Button(
                top, text=key.capitalize(), command=lambda p=preset: self.apply_preset(p)
            ).pack(side=tk.LEFT, padx=2)

        tk.Label(top, text="Rows", fg="white", bg="#1a1a1a").pack(side=tk.LEFT, padx=(8, 0))
        tk.Entry(top, width=4, textvariable=self.rows_var).pack(side=tk.LEFT, padx=4)
        tk.Label(top, text="Cols", fg="white", bg="#1a1a1a").pack(side=tk.LEFT)
        tk.Entry(top, width=4, textvariable=self.cols_var).pack(side=tk.LEFT, padx=4)
        tk.Label(top, text="Mines", fg="white", bg="#1a1a1a").pack(side=tk.LEFT)
        tk.Entry(top, width=5, textvariable=self.mines_var).pack(side=tk.LEFT, padx=4)
        tk.Button(top, text="New Game", command=self.new_game).pack(side=tk.LEFT, padx=8)

        tutor = tk.Frame(self, bg="#1a1a1a")
        tutor.pack(side=tk.TOP, fill=tk.X, padx=8)

        tk.Label(tutor, text="Tutor", fg="white", bg="#1a1a1a").pack(side=tk.LEFT)
        tk.OptionMenu(
            tutor, self.mode_var, *[m.value for m in TutorMode], command=lambda _: self.tutor_changed()
        ).pack(side=tk.LEFT, padx=4)
        tk.Label(tutor, text="Depth", fg="white", bg="#1a1a1a").pack(side=tk.LEFT)
        tk.Spinbox(
            tutor,
            from_=MIN_DEPTH,
            to=MAX_DEPTH,
            width=3,
            textvariable=self.depth_var,
            command=self.tutor_changed,
        ).pack(side=tk.LEFT, padx=4)
        tk.Checkbutton(
            tutor,
            text="Heatmap",
            variable=self.heatmap_var,
            command=self.draw_board,
            fg="white",
            bg="#1a1a1a",
            selectcolor="#1a1a1a",
        ).pack(side=tk.LEFT, padx=4)
        tk.Button(tutor, text="Tutor Step", command=self.tutor_step).pack(side=tk.LEFT, padx=4)

        tk.Label(self, textvariable=self.banner_var, fg="#f5c542", bg="#1a1a1a").pack(
            side=tk.TOP, fill=tk.X, padx=8
        )

    def _build_canvas(self) -> None:
        self.canvas = tk.Canvas(self, bg=CANVAS_BG, highlightthickness=0)
        self.canvas.pack(side=tk.TOP, padx=8, pady=8)
        self.canvas.bind("<Button-1>", self.on_left_click)
        self.canvas.bind("<Button-3>", self.on_right_click)
        # Shift+Left for flag on mac/trackpads that lack right-click
        self.canvas.bind("<Shift-Button-1>", self.on_right_click)
        self.canvas.bind("<Button-2>", self.on_middle_click)
        self.bind("f", self.on_toggle_flag_mode)

        tk.Label(self, textvariable=self.status_var, fg="white", bg="#1a1a1a").pack(
            side=tk.BOTTOM, fill=tk.X, padx=8, pady=(0, 6)
        )

    # Game lifecycle
    def apply_preset(self, preset: BoardConfig) -> None:
        self.rows_var.set(str(preset.rows))
        self.cols_var.set(str(preset.cols))
        self.mines_var.set(str(preset.mines))
        self.new_game()

    def new_game(self) -> None:
        config = BoardConfig.sanitize(self.rows_var.get(), self.cols_var.get(), self.mines_var.get())
        self.rows_var.set(str(config.rows))
        self.cols_var.set(str(config.cols))
        self.mines_var.set(str(config.mines))

        self.session.new_game(config)
        self._game_over_shown = False
        self._flash = {}
        self._resize_canvas()
        self.request_advice()

    def tutor_changed(self) -> None:
        self.session.set_tutor(
            mode=TutorMode(self.mode_var.get()),
            depth=sanitize_depth(self.depth_var.get()),
        )
        self.depth_var.set(str(self.session.settings.depth))
        self.request_advice()

    def on_close(self) -> None:
        self.executor.shutdown(wait=False)
        self.destroy()

    # Advice scheduling
    def request_advice(self) -> None:
        """Start an advisor run for the current board; older runs go stale."""
        self.pending = self.session.submit_advice(self.executor)
        self.draw_board()
        self.after(POLL_MS, self._poll_advice)

    def _poll_advice(self) -> None:
        future = self.pending
        if future is None:
            return
        if not future.done():
            self.after(POLL_MS, self._poll_advice)
            return
        self.pending = None
        advice: Advice = future.result()
        if self.session.apply_advice(advice):
            self._flash = {}
            self.draw_board()

    def tutor_step(self) -> None:
        if self.session.board.game_over or self.session.advice_pending:
            return
        self.session.auto_step()
        self._after_action()

    # Event handlers
    def on_left_click(self, event) -> None:
        self._handle_click(event, action="click")

    def on_right_click(self, event) -> None:
        self._handle_click(event, action="flag")

    def on_middle_click(self, event) -> None:
        self._handle_click(event, action="chord")

    def on_toggle_flag_mode(self, _event=None) -> None:
        self.session.toggle_flag_mode()
        self._update_labels()

    def _handle_click(self, event, action: str) -> None:
        if self.session.board.game_over or self.session.advice_pending:
            return
        row, col = self._coords_from_event(event)
        if row is None:
            return

        if action == "click":
            result = self.session.click(row, col)
        elif action == "flag":
            result = self.session.toggle_flag(row, col)
        else:
            result = self.session.chord(row, col)

        if not result.accepted:
            self._flash = result.highlights
            self.draw_board()
            return
        self._after_action()

    def _after_action(self) -> None:
        self._flash = {}
        if self.session.advice_pending:
            self.request_advice()
        else:
            self.draw_board()
        self._maybe_show_game_over()

    def _maybe_show_game_over(self):
        board = self.session.board
        if not board.game_over or self._game_over_shown:
            return
        self._game_over_shown = True
        if board.win:
            VideoPopup(self, os.path.join(ASSETS_DIR, "win.mp4"), title="You win!")
        else:
            VideoPopup(self, os.path.join(ASSETS_DIR, "lose.mp4"), title="Boom!")

    # Drawing
    def _resize_canvas(self) -> None:
        board = self.session.board
        w = board.cols * CELL_SIZE + BOARD_BORDER * 2
        h = board.rows * CELL_SIZE + BOARD_BORDER * 2
        self.canvas.config(width=w, height=h)

    def draw_board(self) -> None:
        board = self.session.board
        self.canvas.delete("all")
        rows, cols = board.rows, board.cols

        w = cols * CELL_SIZE + BOARD_BORDER * 2
        h = rows * CELL_SIZE + BOARD_BORDER * 2
        self.canvas.create_rectangle(
            0, 0, w - 1, h - 1, outline="black", fill=CANVAS_BG, width=BOARD_BORDER
        )

        highlights = self._flash or self.session.highlights()
        probabilities = self.session.mine_probabilities() if self.heatmap_var.get() else None

        for cell in board.iter_cells():
            x0 = BOARD_BORDER + cell.col * CELL_SIZE
            y0 = BOARD_BORDER + cell.row * CELL_SIZE
            x1 = x0 + CELL_SIZE
            y1 = y0 + CELL_SIZE
            cx, cy = (x0 + x1) / 2, (y0 + y1) / 2

            fill = CELL_OPEN if cell.is_open else CELL_CLOSED
            if cell.is_exploded:
                fill = CELL_EXPLODED
            elif probabilities and cell.coord in probabilities:
                fill = _heat(probabilities[cell.coord])
            self.canvas.create_rectangle(x0, y0, x1, y1, fill=fill, outline="#7a7a7a", width=1)

            tag = highlights.get(cell.coord)
            if tag in HIGHLIGHT_COLORS:
                self.canvas.create_rectangle(
                    x0 + 2, y0 + 2, x1 - 2, y1 - 2, outline=HIGHLIGHT_COLORS[tag], width=3
                )

            if cell.state == CellState.FLAGGED:
                color = "#ff2020" if cell.is_wrong_flag else "black"
                self.canvas.create_text(
                    cx, cy, text=FLAG_GLYPH, fill=color, font=("Segoe UI Emoji", 14, "bold")
                )
            elif cell.is_open and cell.is_mine:
                self.canvas.create_text(cx, cy, text=MINE_GLYPH, font=("Segoe UI Emoji", 14, "bold"))
            elif cell.is_open and cell.adjacent_mines > 0:
                num = cell.adjacent_mines
                self.canvas.create_text(
                    cx,
                    cy,
                    text=str(num),
                    fill=NUMBER_COLORS.get(num, "black"),
                    font=("Arial", 12, "bold"),
                )

        self._update_labels()

    def _update_labels(self) -> None:
        session = self.session
        if session.advice_pending and session.settings.mode is not TutorMode.OFF:
            self.banner_var.set("Thinking...")
        else:
            self.banner_var.set(session.banner())

        metrics = session.metrics()
        parts = [
            f"Mines left: {session.board.remaining_mines_estimate()}",
            f"Value: {metrics.solved_value}/{metrics.total_value}",
            f"Clicks: {metrics.clicks}",
            f"Time: {metrics.elapsed:.1f}s",
        ]
        if metrics.efficiency is not None:
            parts.append(f"Eff: {metrics.efficiency:.0f}%")
        if metrics.value_per_second is not None:
            parts.append(f"3BV/s: {metrics.value_per_second:.2f}")
        if session.flag_mode:
            parts.append("FLAG MODE")
        self.status_var.set("   ".join(parts))

    # Helpers
    def _coords_from_event(self, event) -> tuple:
        board = self.session.board
        col = (event.x - BOARD_BORDER) // CELL_SIZE
        row = (event.y - BOARD_BORDER) // CELL_SIZE
        if 0 <= row < board.rows and 0 <= col < board.cols:
            return int(row), int(col)
        return None, None


def _heat(p: float) -> str:
    """Closed-cell tint from grey (safe) to red (certain mine)."""
    r = int(176 + (255 - 176) * p)
    g = int(176 * (1 - p))
    b = int(176 * (1 - p))
    return f"#{r:02x}{g:02x}{b:02x}"


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = TutorUI()
    app.mainloop()
