"""
app.py  —  PhaseVote Election Console
======================================
Entry screen → choose role:
  ADMIN  — admin key (PIN protected) → Setup + Registry tabs
  VOTER  — Identity + Vote + Results tabs

Election ID and title: set "election_id" / "title" in config.json
Persistence: set "persist": true and fill the "db" block (sql/schema.sql)
"""

import json, os, sys, threading, traceback
import tkinter as tk
from tkinter import scrolledtext, ttk

# ── IMPORTANT: import messagebox this way for Python 3.13 compatibility
from tkinter import messagebox   # noqa — must be separate import

_DIR = os.path.dirname(os.path.abspath(__file__))
os.chdir(_DIR)
if _DIR not in sys.path:
    sys.path.insert(0, _DIR)

from phasevote import admin_module, db, workflows

with open(os.path.join(_DIR, "config.json"), encoding="utf-8") as _f:
    _CFG = json.load(_f)

ELECTION_ID = _CFG["election_id"]
TITLE       = _CFG.get("title", ELECTION_ID)

_HOST = None

def get_host():
    """The single election host shared by both portals (None until the admin key exists)."""
    global _HOST
    if _HOST is None and admin_module.admin_exists():
        _HOST = workflows.open_election()
    return _HOST

# ── Colours ──────────────────────────────────────────────────────────
BG   = "#1e2130"; PANEL = "#252a3d"; ACCENT = "#4a90e2"
OK   = "#27ae60"; ERR   = "#e74c3c"; TEXT   = "#ecf0f1"
SUB  = "#95a5a6"; GOLD  = "#f39c12"; HDR    = "#2c3e6b"
TREE = "#1a1f2e"; ADMIN_HDR = "#2d1a0e"; ADMIN_AC = "#e67e22"


# ── Shared helpers ───────────────────────────────────────────────────
def apply_styles(root):
    s = ttk.Style(root); s.theme_use("clam")
    s.configure("TNotebook", background=BG, borderwidth=0)
    s.configure("TNotebook.Tab", background=PANEL, foreground=SUB,
                padding=[18, 8], font=("Segoe UI", 10, "bold"))
    s.map("TNotebook.Tab",
          background=[("selected", ACCENT)], foreground=[("selected", "white")])
    s.configure("D.TFrame", background=BG)
    s.configure("D.Treeview", background=TREE, foreground=TEXT,
                fieldbackground=TREE, rowheight=24, font=("Consolas", 9))
    s.configure("D.Treeview.Heading", background=HDR, foreground=ACCENT,
                font=("Segoe UI", 9, "bold"), relief="flat")

def mk_log(parent, h=10):
    w = scrolledtext.ScrolledText(parent, height=h, font=("Consolas", 9),
        bg="#0d1117", fg=TEXT, insertbackground=TEXT, state="disabled", relief="flat")
    for tag, colour in (("ok", OK), ("err", ERR), ("warn", GOLD), ("head", ACCENT), ("info", TEXT)):
        w.tag_config(tag, foreground=colour)
    return w

def log_append(w, msg, tag="info"):
    w.configure(state="normal")
    w.insert(tk.END, msg + "\n", tag)
    w.see(tk.END)
    w.configure(state="disabled")

def lbl(parent, text, size=10, bold=False, fg=TEXT, bg=BG):
    return tk.Label(parent, text=text,
                    font=("Segoe UI", size, "bold" if bold else "normal"),
                    bg=bg, fg=fg)

def big_btn(parent, text, cmd, bg=ACCENT, fg="white"):
    return tk.Button(parent, text=text, command=cmd,
                     font=("Segoe UI", 11, "bold"), bg=bg, fg=fg,
                     relief="flat", padx=16, pady=7, cursor="hand2")

def small_btn(parent, text, cmd, bg=PANEL, fg=TEXT):
    return tk.Button(parent, text=text, command=cmd,
                     font=("Segoe UI", 10), bg=bg, fg=fg,
                     relief="flat", padx=12, pady=5, cursor="hand2")

def fentry(parent, var, secret=False, width=28):
    return tk.Entry(parent, textvariable=var, font=("Segoe UI", 10),
                    bg="#151922", fg=TEXT, insertbackground=TEXT,
                    relief="flat", bd=4, width=width,
                    show="•" if secret else "")

def mk_tree(parent, columns, height=6):
    tree = ttk.Treeview(parent, columns=[c for c, _, _ in columns], show="headings",
                        height=height, style="D.Treeview")
    for col, width, heading in columns:
        tree.heading(col, text=heading)
        tree.column(col, width=width, anchor="center")
    return tree

def fill_tree(tree, rows):
    for r in tree.get_children(): tree.delete(r)
    for row in rows: tree.insert("", "end", values=row)

def safe_warn(title, msg, parent=None):
    """Messagebox call that works even before the window is fully ready."""
    try:
        messagebox.showwarning(title, msg, parent=parent)
    except tk.TclError:
        print(f"[WARN] {title}: {msg}")

def safe_error(title, msg, parent=None):
    try:
        messagebox.showerror(title, msg, parent=parent)
    except tk.TclError:
        print(f"[ERROR] {title}: {msg}")

def safe_info(title, msg, parent=None):
    try:
        messagebox.showinfo(title, msg, parent=parent)
    except tk.TclError:
        print(f"[INFO] {title}: {msg}")

def describe_failure(result):
    msg = f"[{result.get('error', 'Error')}] {result.get('message', '')}"
    if "required_phase" in result:
        msg += f"\nRequired phase: {result['required_phase']}"
    return msg


# ══════════════════════════════════════════════════════════════════════
#  ADMIN PORTAL
# ══════════════════════════════════════════════════════════════════════
class AdminPortal(tk.Toplevel):
    def __init__(self, master):
        super().__init__(master)
        self.title("PhaseVote — Admin Portal")
        self.geometry("980x740"); self.minsize(860, 600)
        self.configure(bg=BG)
        apply_styles(self)
        self._pin = tk.StringVar()
        self._build_header()
        self._build_tabs()
        if _CFG.get("persist"):
            self.after(800, self._db_check)

    def _build_header(self):
        bar = tk.Frame(self, bg=ADMIN_HDR, height=54)
        bar.pack(fill="x"); bar.pack_propagate(False)
        lbl(bar, "🔐  ADMIN PORTAL", 13, True, fg="white", bg=ADMIN_HDR
            ).pack(side="left", padx=20, pady=12)
        lbl(bar, "Admin PIN:", 9, True, fg=SUB, bg=ADMIN_HDR).pack(side="right", padx=(0, 20))
        fentry(bar, self._pin, secret=True, width=14).pack(side="right", padx=4)

    def _build_tabs(self):
        nb = ttk.Notebook(self); nb.pack(fill="both", expand=True)
        nb.add(self._setup_tab(nb),    text="   🛠  Setup & Phase   ")
        nb.add(self._registry_tab(nb), text="   📋  Registry   ")

    # ── Setup tab ───────────────────────────────────────────────────
    def _setup_tab(self, parent):
        f = ttk.Frame(parent, style="D.TFrame")
        lbl(f, f"{TITLE}", 13, True, fg=ADMIN_AC).pack(pady=(16, 2))
        lbl(f, f"Election: {ELECTION_ID}   |   Preparation → Voting → Finalized", 9, fg=SUB).pack()

        sp = tk.Frame(f, bg=PANEL, bd=1, relief="groove")
        sp.pack(padx=30, pady=10, fill="x")
        self._admin_status = lbl(sp, "Admin key: Checking...", 11, True, fg=GOLD, bg=PANEL)
        self._admin_status.pack(pady=(10, 2))
        self._stats_lbl = lbl(sp, "", 10, fg=TEXT, bg=PANEL)
        self._stats_lbl.pack(pady=(0, 10))

        bf = tk.Frame(f, bg=BG); bf.pack(pady=8)
        big_btn(bf, "🛠  Initialise Admin Key", self._init_admin, ADMIN_AC).grid(row=0, column=0, padx=8)
        big_btn(bf, "▶  Start Voting", lambda: self._run_command("start_voting"), OK).grid(row=0, column=1, padx=8)
        big_btn(bf, "🏁  Finalize Election", lambda: self._run_command("finalize_election"), ERR
                ).grid(row=0, column=2, padx=8)

        lf = tk.LabelFrame(f, text="  Admin Activity Log  ",
                           font=("Segoe UI", 9, "bold"), bg=BG, fg=ADMIN_AC, bd=1, relief="groove")
        lf.pack(fill="both", expand=True, padx=30, pady=(4, 14))
        self._log = mk_log(lf)
        self._log.pack(fill="both", expand=True, padx=4, pady=4)

        self._refresh_status()
        return f

    # ── Registry tab ────────────────────────────────────────────────
    def _registry_tab(self, parent):
        f = ttk.Frame(parent, style="D.TFrame")
        form = tk.Frame(f, bg=PANEL, bd=1, relief="groove")
        form.pack(padx=30, pady=(16, 6), fill="x")

        self._cand_name = tk.StringVar(); self._voter_id = tk.StringVar()
        lbl(form, "Candidate name:", bold=True, bg=PANEL).grid(row=0, column=0, padx=(20, 6), pady=8, sticky="e")
        fentry(form, self._cand_name, width=36).grid(row=0, column=1, pady=8, sticky="w")
        small_btn(form, "➕  Add Candidate", self._add_candidate, ACCENT, "white"
                  ).grid(row=0, column=2, padx=12)
        lbl(form, "Voter identity:", bold=True, bg=PANEL).grid(row=1, column=0, padx=(20, 6), pady=8, sticky="e")
        fentry(form, self._voter_id, width=46).grid(row=1, column=1, pady=8, sticky="w")
        small_btn(form, "✔  Authorize Voter", self._authorize_voter, ACCENT, "white"
                  ).grid(row=1, column=2, padx=12)

        lbl(form, "Batch (one identity per line):", bold=True, bg=PANEL
            ).grid(row=2, column=0, padx=(20, 6), pady=8, sticky="ne")
        self._batch = tk.Text(form, height=4, width=48, font=("Consolas", 9),
                              bg="#151922", fg=TEXT, insertbackground=TEXT, relief="flat")
        self._batch.grid(row=2, column=1, pady=8, sticky="w")
        bcol = tk.Frame(form, bg=PANEL); bcol.grid(row=2, column=2, padx=12)
        small_btn(bcol, "✔✔  Authorize Batch", self._authorize_batch, ACCENT, "white").pack(pady=2)
        small_btn(bcol, "📋  Import CSVs", self._import_csv).pack(pady=2)

        tf = tk.Frame(f, bg=BG); tf.pack(fill="both", expand=True, padx=30, pady=(4, 14))
        self._cand_tree = mk_tree(tf, [("id", 50, "ID"), ("name", 260, "Candidate"), ("votes", 80, "Votes")])
        self._cand_tree.pack(side="left", fill="both", expand=True, padx=(0, 8))
        self._voter_tree = mk_tree(tf, [("identity", 330, "Authorized Identity"), ("voted", 70, "Voted")])
        self._voter_tree.pack(side="left", fill="both", expand=True)
        return f

    # ── Helpers ──────────────────────────────────────────────────────
    def _emit(self, msg, tag="info"):
        self.after(0, lambda: log_append(self._log, msg, tag))

    def _db_check(self):
        if not db.test_connection():
            safe_warn("Database Not Connected",
                "Cannot connect to MySQL.\n\n"
                "1. Start MySQL\n"
                "2. Open config.json → set the correct password\n"
                "3. Run sql/schema.sql to create tables\n"
                "4. Restart this application",
                parent=self)

    def _refresh_status(self):
        if not admin_module.admin_exists():
            self._admin_status.config(text="Admin key:  ⚠️  NOT INITIALISED", fg=GOLD)
            self._stats_lbl.config(text="Enter a PIN above and click 'Initialise Admin Key'.")
            return
        self._admin_status.config(text=f"Admin:  ✅  {admin_module.admin_identity()}", fg=OK)
        host = get_host()
        stats = host.query("get_election_stats")["result"]
        self._stats_lbl.config(text=(
            f"Phase: {stats['phase']}   |   Candidates: {stats['candidate_count']}   |   "
            f"Voters: {stats['voter_count']}   |   Votes: {stats['total_votes']}"))
        fill_tree(self._cand_tree, [(c["id"], c["name"], c["vote_count"])
                                    for c in host.query("get_all_candidates")["result"]])
        fill_tree(self._voter_tree, [(i, "yes" if host.query("has_voted", identity=i)["result"] else "no")
                                     for i in host.query("get_authorized_voters")["result"]])

    def _init_admin(self):
        pin = self._pin.get().strip()
        if len(pin) < 4:
            safe_warn("PIN Error", "Admin PIN must be at least 4 characters.", parent=self); return
        def run():
            try:
                info = admin_module.initialize_admin(pin, log_fn=self._emit)
                self._emit("Admin key already existed — reloaded." if info["already_existed"]
                           else "Admin key initialised ✅", "warn" if info["already_existed"] else "ok")
                self.after(0, self._refresh_status)
            except Exception as exc:
                self._emit(f"Admin init FAILED: {exc}", "err")
        threading.Thread(target=run, daemon=True).start()

    def _run_command(self, action, **args):
        host = get_host()
        if host is None:
            safe_warn("Admin", "Initialise the admin key first.", parent=self); return
        pin = self._pin.get().strip()
        if not pin:
            safe_warn("PIN", "Enter the admin PIN first.", parent=self); return
        def run():
            try:
                self._emit(f"── {action} ──", "head")
                result = workflows.admin_command(host, pin, action, log_fn=self._emit, **args)
                if result["success"]:
                    self._emit(f"{action}: OK {result.get('result') or ''}", "ok")
                else:
                    msg = describe_failure(result)
                    self._emit(f"{action}: {msg}", "err")
                    self.after(0, lambda: safe_error("Command Failed", msg, parent=self))
            except Exception as exc:
                self._emit(f"UNEXPECTED ERROR: {exc}", "err")
                self._emit(traceback.format_exc(), "err")
            finally:
                self.after(0, self._refresh_status)
        threading.Thread(target=run, daemon=True).start()

    def _add_candidate(self):
        self._run_command("add_candidate", name=self._cand_name.get())
        self._cand_name.set("")

    def _authorize_voter(self):
        self._run_command("authorize_voter", identity=self._voter_id.get().strip())
        self._voter_id.set("")

    def _authorize_batch(self):
        lines = [ln.strip() for ln in self._batch.get("1.0", tk.END).splitlines() if ln.strip()]
        self._run_command("authorize_multiple_voters", identities=lines)

    def _import_csv(self):
        host = get_host()
        if host is None:
            safe_warn("Admin", "Initialise the admin key first.", parent=self); return
        pin = self._pin.get().strip()
        def run():
            result = workflows.import_from_csv(host, pin, log_fn=self._emit)
            if result["success"]:
                self._emit(result["message"], "ok")
                for ident in result["skipped"]:
                    self._emit(f"Skipped voter row: {ident!r}", "warn")
            else:
                self._emit(describe_failure(result), "err")
            self.after(0, self._refresh_status)
        threading.Thread(target=run, daemon=True).start()


# ══════════════════════════════════════════════════════════════════════
#  VOTER PORTAL
# ══════════════════════════════════════════════════════════════════════
class VoterPortal(tk.Toplevel):
    def __init__(self, master):
        super().__init__(master)
        self.title("PhaseVote — Voter Portal")
        self.geometry("1000x760"); self.minsize(860, 650)
        self.configure(bg=BG)
        apply_styles(self)
        self._build_header()
        self._build_tabs()

    def _build_header(self):
        bar = tk.Frame(self, bg=HDR, height=54)
        bar.pack(fill="x"); bar.pack_propagate(False)
        lbl(bar, f"🗳  {TITLE}", 13, True, fg="white", bg=HDR).pack(side="left", padx=20, pady=12)
        lbl(bar, "Signed  •  One vote per identity  •  Auditable",
            9, fg=SUB, bg=HDR).pack(side="right", padx=20)

    def _build_tabs(self):
        nb = ttk.Notebook(self); nb.pack(fill="both", expand=True)
        nb.add(self._identity_tab(nb), text="   🔑  Identity   ")
        nb.add(self._vote_tab(nb),     text="   🗳  Vote   ")
        nb.add(self._results_tab(nb),  text="   📊  Results & Audit   ")

    # ── Identity tab ────────────────────────────────────────────────
    def _identity_tab(self, parent):
        f = ttk.Frame(parent, style="D.TFrame")
        lbl(f, "Create Voter Identity", 13, True, fg=ACCENT).pack(pady=(16, 2))
        lbl(f, "Generates an RSA key pair; your identity is derived from the public key.",
            9, fg=SUB).pack(pady=(0, 6))
        form = tk.Frame(f, bg=PANEL, bd=1, relief="groove")
        form.pack(padx=40, pady=4, fill="x")
        self._new_label = tk.StringVar(); self._new_pin = tk.StringVar()
        for i, (text, var, secret) in enumerate([("Label", self._new_label, False),
                                                 ("PIN (min 4 chars)", self._new_pin, True)]):
            lbl(form, f"{text}:", bold=True, bg=PANEL).grid(row=i, column=0, padx=(20, 6), pady=8, sticky="e")
            fentry(form, var, secret).grid(row=i, column=1, padx=(0, 20), pady=8, sticky="w")
        big_btn(form, "🔑  Create Identity", self._on_create).grid(row=2, column=0, columnspan=2, pady=14)

        self._id_result = tk.StringVar()
        tk.Entry(f, textvariable=self._id_result, font=("Consolas", 10), state="readonly",
                 readonlybackground="#1a2535", fg=GOLD, relief="flat", width=60).pack(pady=6)
        lf = tk.LabelFrame(f, text="  Identity Log  ", font=("Segoe UI", 9, "bold"),
                           bg=BG, fg=ACCENT, bd=1, relief="groove")
        lf.pack(fill="both", expand=True, padx=40, pady=(4, 14))
        self._id_log = mk_log(lf); self._id_log.pack(fill="both", expand=True, padx=4, pady=4)
        return f

    # ── Vote tab ────────────────────────────────────────────────────
    def _vote_tab(self, parent):
        f = ttk.Frame(parent, style="D.TFrame")
        lbl(f, "Cast Your Vote", 13, True, fg=ACCENT).pack(pady=(16, 2))
        outer = tk.Frame(f, bg=BG); outer.pack(fill="both", expand=True, padx=20, pady=8)

        left = tk.Frame(outer, bg=PANEL, bd=1, relief="groove")
        left.pack(side="left", fill="y", padx=(0, 12), ipadx=10, ipady=10)
        self._vid = tk.StringVar(); self._vpin = tk.StringVar()
        for i, (text, var, secret) in enumerate([("Identity", self._vid, False), ("PIN", self._vpin, True)]):
            lbl(left, f"{text}:", bold=True, bg=PANEL).grid(row=i, column=0, padx=(14, 4), pady=6, sticky="e")
            fentry(left, var, secret, width=30).grid(row=i, column=1, padx=(0, 14), pady=6, sticky="w")
        lbl(left, "Select Candidate:", 10, True, bg=PANEL).grid(row=2, column=0, columnspan=2, pady=(14, 4))
        self._cvar = tk.IntVar(value=0)
        self._radio_frame = tk.Frame(left, bg=PANEL)
        self._radio_frame.grid(row=3, column=0, columnspan=2, padx=14, pady=4)
        small_btn(left, "🔄  Reload Candidates", self._load_candidates).grid(row=4, column=0, columnspan=2)
        self._btn_vote = big_btn(left, "🗳  Cast Vote", self._on_vote, OK)
        self._btn_vote.grid(row=5, column=0, columnspan=2, pady=12)

        lf = tk.LabelFrame(outer, text="  Vote Log  ", font=("Segoe UI", 9, "bold"),
                           bg=BG, fg=ACCENT, bd=1, relief="groove")
        lf.pack(side="left", fill="both", expand=True)
        self._vote_log = mk_log(lf); self._vote_log.pack(fill="both", expand=True, padx=4, pady=4)
        self._load_candidates()
        return f

    # ── Results tab ─────────────────────────────────────────────────
    def _results_tab(self, parent):
        f = ttk.Frame(parent, style="D.TFrame")
        lbl(f, "Public Results Board", 13, True, fg=ACCENT).pack(pady=(16, 2))
        lbl(f, "Votes and identities are public; every change is in the hash-chained audit log.",
            9, fg=SUB).pack()
        self._winner_lbl = lbl(f, "", 11, True, fg=GOLD); self._winner_lbl.pack(pady=4)
        bf = tk.Frame(f, bg=BG); bf.pack(pady=4)
        small_btn(bf, "🔄  Refresh", self._refresh_results, ACCENT, "white").grid(row=0, column=0, padx=6)
        small_btn(bf, "🔍  Verify Audit Chain", self._verify_chain).grid(row=0, column=1, padx=6)
        small_btn(bf, "💾  Export Audit Log", self._export_log).grid(row=0, column=2, padx=6)

        self._tt = mk_tree(f, [("id", 60, "ID"), ("name", 380, "Candidate"), ("votes", 130, "Votes")], height=5)
        self._tt.pack(fill="x", padx=30, pady=(4, 8))
        self._at = mk_tree(f, [("seq", 50, "#"), ("name", 140, "Event"), ("payload", 420, "Payload"),
                               ("hash", 170, "Hash")], height=8)
        self._at.pack(fill="both", expand=True, padx=30, pady=(0, 14))
        self.after(600, self._refresh_results)
        return f

    # ── Voter helpers ────────────────────────────────────────────────
    def _emit_vote(self, msg, tag="info"):
        self.after(0, lambda: log_append(self._vote_log, msg, tag))

    def _emit_id(self, msg, tag="info"):
        self.after(0, lambda: log_append(self._id_log, msg, tag))

    def _load_candidates(self):
        for w in self._radio_frame.winfo_children(): w.destroy()
        host = get_host()
        rows = host.query("get_all_candidates")["result"] if host else []
        if rows: self._cvar.set(rows[0]["id"])
        for c in rows:
            tk.Radiobutton(self._radio_frame, text=f"#{c['id']}  {c['name']}",
                variable=self._cvar, value=c["id"],
                font=("Segoe UI", 11), bg=PANEL, fg=TEXT,
                selectcolor=ACCENT, activebackground=PANEL,
                activeforeground=TEXT, cursor="hand2"
            ).pack(anchor="w", pady=2)

    def _on_create(self):
        pin = self._new_pin.get().strip()
        if len(pin) < 4:
            safe_warn("PIN Error", "PIN must be at least 4 characters.", parent=self); return
        def run():
            result = workflows.create_voter_identity(pin, self._new_label.get().strip(), log_fn=self._emit_id)
            if result["success"]:
                self.after(0, lambda: self._id_result.set(result["identity"]))
                self._emit_id(result["message"], "ok")
            else:
                self._emit_id(f"FAILED: {result['message']}", "err")
        threading.Thread(target=run, daemon=True).start()

    def _on_vote(self):
        host = get_host()
        ident, pin, choice = self._vid.get().strip(), self._vpin.get().strip(), self._cvar.get()
        if host is None:
            safe_warn("Election", "The election has not been set up yet.", parent=self); return
        if not all([ident, pin, choice]):
            safe_warn("Input Error", "Identity, PIN and a candidate are required.", parent=self); return
        self._btn_vote.config(state="disabled")
        def run():
            try:
                result = workflows.cast_vote(host, ident, pin, choice, log_fn=self._emit_vote)
                if result["success"]:
                    self.after(0, lambda: safe_info("Vote Cast", f"Your vote for #{choice} was recorded.",
                                                    parent=self))
                else:
                    msg = describe_failure(result)
                    self._emit_vote(f"FAILED: {msg}", "err")
                    self.after(0, lambda: safe_error("Vote Failed", msg, parent=self))
            except Exception as exc:
                self._emit_vote(f"UNEXPECTED ERROR: {exc}", "err")
                self._emit_vote(traceback.format_exc(), "err")
            finally:
                self.after(0, lambda: self._btn_vote.config(state="normal"))
        threading.Thread(target=run, daemon=True).start()

    def _refresh_results(self):
        host = get_host()
        if host is None:
            self._winner_lbl.config(text="Election not set up yet."); return
        fill_tree(self._tt, [(c["id"], c["name"], c["vote_count"]) for c in workflows.results_table(host)])
        fill_tree(self._at, [(e["seq"], e["name"], json.dumps(e["payload"]), e["hash"][:20] + "...")
                             for e in host.audit_log()])
        winner = host.query("get_winner")
        if winner["success"]:
            w = winner["result"]
            self._winner_lbl.config(text=f"🏆  Winner: #{w['id']} {w['name']} ({w['vote_count']} votes)")
        else:
            stats = host.query("get_election_stats")["result"]
            self._winner_lbl.config(text=f"Phase: {stats['phase']}  —  {winner['message']}")

    def _verify_chain(self):
        host = get_host()
        if host is None: return
        ok, bad = host.verify_audit_log()
        if ok:
            safe_info("Audit Log", "Hash chain verified ✅", parent=self)
        else:
            safe_error("Audit Log", f"Hash chain BROKEN at event #{bad}", parent=self)

    def _export_log(self):
        host = get_host()
        if host is None: return
        result = workflows.export_audit_log(host)
        (safe_info if result["success"] else safe_error)("Audit Log", result["message"], parent=self)


# ══════════════════════════════════════════════════════════════════════
#  ENTRY SCREEN
# ══════════════════════════════════════════════════════════════════════
class EntryScreen(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("PhaseVote — Welcome")
        self.geometry("540x380"); self.resizable(False, False)
        self.configure(bg=BG)
        self._build()

    def _build(self):
        bar = tk.Frame(self, bg=HDR, height=72)
        bar.pack(fill="x"); bar.pack_propagate(False)
        lbl(bar, "🏆  PhaseVote", 22, True, fg="white", bg=HDR).pack(pady=(10, 2))
        lbl(bar, "Phase-Gated Auditable Election Console", 10, fg=SUB, bg=HDR).pack()

        lbl(self, "Select your role to continue:", 12).pack(pady=(28, 6))
        lbl(self, f"Election: {ELECTION_ID}", 10, fg=GOLD).pack(pady=(0, 20))

        bf = tk.Frame(self, bg=BG); bf.pack()
        tk.Button(bf, text="🔐  ADMIN PORTAL", command=lambda: AdminPortal(self),
            font=("Segoe UI", 13, "bold"), bg=ADMIN_AC, fg="white",
            relief="flat", padx=24, pady=16, cursor="hand2", width=16).grid(row=0, column=0, padx=24)
        tk.Button(bf, text="🗳  VOTER PORTAL", command=lambda: VoterPortal(self),
            font=("Segoe UI", 13, "bold"), bg=ACCENT, fg="white",
            relief="flat", padx=24, pady=16, cursor="hand2", width=16).grid(row=0, column=1, padx=24)
        lbl(self, "Admin commands are signed with the admin key; votes with each voter's key.",
            8, fg=SUB).pack(pady=20)


if __name__ == "__main__":
    EntryScreen().mainloop()
