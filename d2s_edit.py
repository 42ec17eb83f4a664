"""Tkinter front-end for the D2R save unlocker.

Shows which unlock steps a loaded save already has and lets the user tick
the ones to apply. The checked steps are turned into a one-off
:class:`policies.PatchPolicy` and written through :mod:`savefile_io`, so the
backup and checksum handling is the same as for the command-line tool.
"""

from __future__ import annotations

import os
from pathlib import Path
import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from typing import Dict, List, Optional, Tuple

from ttkwidgets import CheckboxTreeview

import d2s
import d2s_settings as settings_module
import localization
import savefile_io
from policies import (
    WAYPOINTS_A3WP1_ENABLED,
    Act,
    Difficulty,
    PatchEdit,
    PatchPolicy,
    Quest,
    complete_act2_edits,
    difficulty_unlock_edits,
    quest_table_edits,
    waypoint_offset,
)

DIFFICULTY_LABELS: Dict[Difficulty, str] = {
    Difficulty.NORMAL: "普通 (Normal)",
    Difficulty.NIGHTMARE: "噩梦 (Nightmare)",
    Difficulty.HELL: "地狱 (Hell)",
}

PRESETS: Dict[str, Tuple[str, ...]] = {
    "minimal": ("difficulty",) + tuple(f"waypoint:{d.name}" for d in Difficulty),
    "full": ("difficulty", "quest_table") + tuple(f"waypoint:{d.name}" for d in Difficulty),
}


def step_edits() -> Dict[str, Tuple[PatchEdit, ...]]:
    steps: Dict[str, Tuple[PatchEdit, ...]] = {
        "difficulty": difficulty_unlock_edits(),
        "quest_table": quest_table_edits(),
    }
    for difficulty in Difficulty:
        steps[f"act2:{difficulty.name}"] = complete_act2_edits(difficulty)
        steps[f"waypoint:{difficulty.name}"] = (
            PatchEdit(waypoint_offset(difficulty), WAYPOINTS_A3WP1_ENABLED),
        )
    return steps


def step_applied(data: bytes, step: str) -> bool:
    if step == "difficulty":
        return d2s.difficulty_unlocked(data)
    if step == "quest_table":
        return all(data[edit.offset] & edit.value == edit.value for edit in quest_table_edits())
    kind, _, name = step.partition(":")
    difficulty = Difficulty[name]
    if kind == "waypoint":
        return d2s.waypoint_unlocked(data, difficulty)
    return d2s.quest_completed(data, difficulty, Act.SECRET_OF_THE_VIZJEREI, Quest.SIXTH)


def build_policy(steps: List[str]) -> PatchPolicy:
    available = step_edits()
    edits: Tuple[PatchEdit, ...] = ()
    for step in steps:
        edits += available[step]
    return PatchPolicy(name="custom", edits=edits)


class D2SaveEditor(tk.Tk):
    """Main application window."""

    def __init__(self) -> None:
        super().__init__()
        self.title("D2R Save Unlocker")

        self.settings = settings_module.load_settings()
        self.language = localization.resolve_language(str(self.settings["language"]))
        self.filename: str = ""
        self.data: bytes | None = None

        self.make_backup_var = tk.BooleanVar(value=bool(self.settings["make_backup"]))
        self.loaded_file_var = tk.StringVar(value="已加载文件 (Loaded File): 无")
        self._tree: Optional[CheckboxTreeview] = None

        self._build_layout()
        self._open_remembered_file()
    # ------------------------------------------------------------------
    # Layout construction helpers
    # ------------------------------------------------------------------
    def _build_layout(self) -> None:
        container = ttk.Frame(self, padding=12)
        container.pack(fill="both", expand=True)
        container.columnconfigure(0, weight=1)
        container.rowconfigure(2, weight=1)

        top_frame = ttk.Frame(container)
        top_frame.grid(column=0, row=0, sticky="ew")
        top_frame.columnconfigure(1, weight=1)
        ttk.Button(top_frame, text="打开存档 (Open Save)", command=self.open_save_file).grid(
            column=0, row=0, sticky="w"
        )
        ttk.Label(top_frame, textvariable=self.loaded_file_var).grid(
            column=1, row=0, sticky="w", padx=(10, 0)
        )

        button_frame = ttk.Frame(container)
        button_frame.grid(column=0, row=1, sticky="w", pady=(12, 0))
        ttk.Button(
            button_frame,
            text="基础解锁 (Minimal)",
            command=lambda: self.select_preset("minimal"),
        ).pack(side="left", padx=(0, 6))
        ttk.Button(
            button_frame,
            text="完整解锁 (Full)",
            command=lambda: self.select_preset("full"),
        ).pack(side="left", padx=(0, 6))
        ttk.Button(
            button_frame,
            text="全部取消 (Select None)",
            command=self.select_none,
        ).pack(side="left")

        tree_container = ttk.Frame(container)
        tree_container.grid(column=0, row=2, sticky="nsew", pady=(12, 0))
        tree_container.columnconfigure(0, weight=1)
        tree_container.rowconfigure(0, weight=1)
        self._tree = self._create_tree(tree_container)
        self._populate_tree()

        bottom_frame = ttk.Frame(container)
        bottom_frame.grid(column=0, row=3, sticky="ew", pady=(12, 0))
        bottom_frame.columnconfigure(0, weight=1)
        ttk.Checkbutton(
            bottom_frame,
            text="修改前备份 (Backup before writing)",
            variable=self.make_backup_var,
        ).grid(column=0, row=0, sticky="w")
        ttk.Button(bottom_frame, text="应用 (Apply)", command=self.apply_selected).grid(
            column=1, row=0, sticky="e"
        )

    def _create_tree(self, container: ttk.Frame) -> CheckboxTreeview:
        tree = CheckboxTreeview(container, columns=("state",), show="tree headings", selectmode="none")
        tree.grid(column=0, row=0, sticky="nsew")
        yscroll = ttk.Scrollbar(container, orient="vertical", command=tree.yview)
        yscroll.grid(column=1, row=0, sticky="ns")
        tree.configure(yscrollcommand=yscroll.set)
        tree.column("#0", anchor="w", width=320, stretch=True)
        tree.column("state", anchor="center", width=140, stretch=False)
        tree.heading("#0", text="解锁项 (Unlock)")
        tree.heading("state", text="当前状态 (Current)")
        return tree

    def _populate_tree(self) -> None:
        tree = self._tree
        tree.insert("", "end", iid="general", text="通用 (General)", open=True)
        tree.insert("general", "end", iid="difficulty", text="解锁所有难度 (Unlock difficulties)", values=("-",))
        tree.insert("general", "end", iid="quest_table", text="完成任务表 (Quest table)", values=("-",))
        for difficulty, label in DIFFICULTY_LABELS.items():
            parent = f"difficulty:{difficulty.name}"
            tree.insert("", "end", iid=parent, text=label, open=True)
            tree.insert(parent, "end", iid=f"act2:{difficulty.name}", text="完成A2 (Complete Act II)", values=("-",))
            tree.insert(parent, "end", iid=f"waypoint:{difficulty.name}", text="A3第一个路点 (Act III waypoint)", values=("-",))
        self.select_preset(str(self.settings["profile"]))

    def _leaf_ids(self) -> List[str]:
        return list(step_edits())

    def _sync_parent_states(self) -> None:
        tree = self._tree
        for parent in tree.get_children(""):
            children = tree.get_children(parent)
            checked = [child for child in children if tree.tag_has("checked", child)]
            if len(checked) == len(children):
                tree.change_state(parent, "checked")
            elif checked:
                tree.change_state(parent, "tristate")
            else:
                tree.change_state(parent, "unchecked")
    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select_preset(self, name: str) -> None:
        chosen = set(PRESETS.get(name, PRESETS["minimal"]))
        for iid in self._leaf_ids():
            self._tree.change_state(iid, "checked" if iid in chosen else "unchecked")
        self._sync_parent_states()

    def select_none(self) -> None:
        self._tree.uncheck_all()

    def selected_steps(self) -> List[str]:
        checked = set(self._tree.get_checked())
        return [iid for iid in self._leaf_ids() if iid in checked]
    # ------------------------------------------------------------------
    # File handling
    # ------------------------------------------------------------------
    def _open_remembered_file(self) -> None:
        last_path = str(self.settings.get("last_path") or "")
        if self.settings.get("remember_path") and last_path and os.path.isfile(last_path):
            self._load(last_path)

    def open_save_file(self) -> None:
        initdir = os.getcwd()
        saved_games = Path.home() / "Saved Games" / "Diablo II Resurrected"
        if saved_games.is_dir():
            initdir = str(saved_games)

        filename = filedialog.askopenfilename(
            title="选择D2R存档 (Select D2R save)",
            initialdir=initdir,
            filetypes=(("d2s files", "*.d2s"), ("all files", "*.*")),
        )
        if filename:
            self._load(filename)

    def _load(self, filename: str) -> None:
        try:
            data = savefile_io.load(filename)
        except OSError as exc:
            messagebox.showerror("文件错误 (File error)", f"无法打开存档。\n{exc}")
            return
        if not d2s.is_valid_save(data):
            messagebox.showerror(
                "文件错误 (File error)",
                localization.translate(self.language, "invalid_save", name=os.path.basename(filename)),
            )
            return

        self.filename = filename
        self.data = data
        self.loaded_file_var.set(f"已加载文件 (Loaded File): {os.path.basename(filename)}")
        if self.settings.get("remember_path"):
            self.settings["last_path"] = filename
            settings_module.save_settings(self.settings)
        self.refresh_current_values()

    def refresh_current_values(self) -> None:
        for iid in self._leaf_ids():
            if self.data is None:
                value = "-"
            else:
                value = "O" if step_applied(self.data, iid) else "X"
            self._tree.set(iid, "state", value)

    def apply_selected(self) -> None:
        if self.data is None or not self.filename:
            messagebox.showwarning("没有文件 (No file)", "请先打开存档文件。(Open a save file first.)")
            return
        steps = self.selected_steps()
        if not steps:
            return

        policy = build_policy(steps)
        try:
            outcome = savefile_io.patch_file(self.filename, policy, make_backup=self.make_backup_var.get())
        except d2s.SaveFixError as exc:
            messagebox.showerror("更新失败 (Update failed)", str(exc))
            return
        except OSError as exc:
            messagebox.showerror(
                "保存失败 (Save failed)",
                localization.translate(self.language, "write_failed", error=exc),
            )
            return

        self.data = savefile_io.load(self.filename)
        self.refresh_current_values()
        message = localization.translate(
            self.language, "success", profile=outcome.policy, name=os.path.basename(self.filename)
        )
        if outcome.backup_path is not None:
            message += "\n" + localization.translate(self.language, "backup_written", path=outcome.backup_path)
        messagebox.showinfo("完成 (Done)", message)


def main() -> None:
    app = D2SaveEditor()
    app.mainloop()


if __name__ == "__main__":
    main()
