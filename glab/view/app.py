# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Interactive pipeline viewer.

A JobPoller thread posts job snapshots to an event queue. The viewer loop
is the only consumer: it takes one event at a time (snapshot, key press,
log output, fatal error or heartbeat), updates its state and repaints.
"""

import itertools
import logging
import queue
import sys
import threading
import time
from typing import Optional

from gitlab.exceptions import GitlabError

from ..errors import BoxNotFoundError, GlabError, JobActionError
from ..trace import stream_job_trace
from .canvas import Canvas
from .model import JobKind, PipelineRef, PipelineStack, ViewJob
from .poller import JobPoller
from .render import (
    draw_frame,
    draw_jobs,
    draw_logs,
    draw_modal,
    draw_status_line,
    inner_rect,
    strip_ansi,
)
from .connectors import link_jobs
from .state import (
    BUTTON_YES,
    BUTTONS,
    CANCEL,
    RUN,
    Fatal,
    JobsUpdated,
    KeyPress,
    LogOutput,
    LogsVisible,
    ModalVisible,
    Normal,
    Tick,
    TraceSession,
    ViewerState,
)

logger = logging.getLogger(__name__)

KEY_TIMEOUT = 0.1
HEARTBEAT = 1.0

CLOSE_KEYS = ("q", "esc")
RESUME_PROMPT = "\nPress <Enter> to resume the ci GUI view.\n"


class EventWriter:
    """File-like object turning trace output into LogOutput events"""

    def __init__(self, events: queue.Queue, session: int):
        self.events = events
        self.session = session

    def write(self, text: str) -> int:
        self.events.put(LogOutput(self.session, text))
        return len(text)

    def flush(self):
        pass


class PipelineViewer:
    def __init__(self, client, stack: PipelineStack, terminal, title: str = "",
                 refresh_interval: float = 5, output=None, stdin=None):
        self.client = client
        self.stack = stack
        self.terminal = terminal
        self.title = title
        self.output = output or sys.stdout
        self.stdin = stdin or sys.stdin

        self.events: queue.Queue = queue.Queue()
        self.stop = threading.Event()
        self.refresh = threading.Event()
        self.paused = threading.Event()
        self.poller = JobPoller(
            client, stack, self.events, refresh_interval,
            stop=self.stop, refresh=self.refresh, paused=self.paused,
        )
        self.state = ViewerState()
        self._sessions = itertools.count(1)
        self._last_draw = 0.0
        self._dirty = True

    @property
    def pipeline(self) -> PipelineRef:
        return self.stack.top()

    def run(self):
        """Run until the user quits; fatal errors are raised."""
        self.poller.start()
        try:
            while True:
                event = self.next_event()
                if self.handle(event) is False:
                    return
                if self._dirty or time.monotonic() - self._last_draw >= HEARTBEAT:
                    self.draw()
        finally:
            self.shutdown()

    def shutdown(self):
        self.stop.set()
        self.refresh.set()
        self._close_logs()

    def next_event(self):
        try:
            return self.events.get_nowait()
        except queue.Empty:
            pass
        key = self.terminal.read_key(KEY_TIMEOUT)
        if key is not None:
            return KeyPress(key)
        try:
            return self.events.get_nowait()
        except queue.Empty:
            return Tick()

    def force_update(self):
        self.refresh.set()

    # event dispatch

    def handle(self, event) -> Optional[bool]:
        """Apply one event; returns False when the viewer should exit."""
        if isinstance(event, Fatal):
            raise event.error
        if isinstance(event, JobsUpdated):
            self._on_jobs(event)
        elif isinstance(event, LogOutput):
            self._on_log_output(event)
        elif isinstance(event, KeyPress):
            return self.handle_key(event.key)
        return None

    def _on_jobs(self, event: JobsUpdated):
        if event.pipeline != self.pipeline:
            # fetched before the user moved to another pipeline
            return
        self.state.apply_snapshot(event.jobs)
        self._dirty = True

    def _on_log_output(self, event: LogOutput):
        mode = self.state.mode
        if isinstance(mode, LogsVisible) and mode.session.id == event.session:
            mode.session.append(event.text)
            self._dirty = True

    def handle_key(self, key: str) -> Optional[bool]:
        self._dirty = True
        if key == "ctrl-q":
            return False
        mode = self.state.mode
        if isinstance(mode, ModalVisible):
            return self._modal_key(mode, key)
        if isinstance(mode, LogsVisible):
            return self._logs_key(mode, key)
        return self._normal_key(key)

    def _normal_key(self, key: str) -> Optional[bool]:
        state = self.state
        if key in CLOSE_KEYS:
            return self._ascend()

        if state.jobs:
            state.cur_job = state.navigator.navigate(state.jobs, key)
        job = state.cur_job
        if job is None:
            return None

        if key == "enter":
            if job.kind == JobKind.JOB:
                self._open_logs(job)
            else:
                self._descend(job)
        elif key == "ctrl-d":
            if job.kind == JobKind.JOB and job.status in ("pending", "running"):
                self._open_modal(CANCEL, job)
        elif key in ("ctrl-r", "ctrl-p"):
            if job.kind == JobKind.JOB:
                self._open_modal(RUN, job)
        elif key == "ctrl-space":
            if job.kind == JobKind.JOB:
                self.suspend_to_trace(job)
        return None

    def _logs_key(self, mode: LogsVisible, key: str) -> Optional[bool]:
        session = mode.session
        if key in CLOSE_KEYS or key == "enter":
            self._close_logs()
        elif key in ("up", "k"):
            session.scroll = min(session.scroll + 1, max(len(session.lines) - 1, 0))
        elif key in ("down", "j"):
            session.scroll = max(session.scroll - 1, 0)
        elif key == "g":
            session.scroll = max(len(session.lines) - 1, 0)
        elif key == "G":
            session.scroll = 0
        elif key == "ctrl-space":
            job = session.job
            self._close_logs()
            self.suspend_to_trace(job)
        return None

    def _modal_key(self, mode: ModalVisible, key: str) -> Optional[bool]:
        if key in CLOSE_KEYS:
            self._close_modal()
        elif key in ("tab", "left", "right", "h", "l"):
            mode.selected = (mode.selected + 1) % len(BUTTONS)
        elif key == "enter":
            self._close_modal()
            if BUTTONS[mode.selected] == BUTTON_YES:
                self._run_action(mode)
        return None

    # transitions

    def _ascend(self) -> Optional[bool]:
        child = self.stack.pop()
        if child is None:
            return False
        logger.info("Leaving child pipeline %s for %s", child.id, self.pipeline.id)
        self.state.reset_cursor()
        self.state.jobs = []
        self.force_update()
        return None

    def _descend(self, bridge: ViewJob):
        downstream = bridge.downstream_pipeline
        if not downstream:
            self.state.message = f"{bridge.name} has not triggered a pipeline yet"
            return
        child = PipelineRef.from_payload(downstream, self.pipeline.project_id)
        logger.info("Entering child pipeline %s from %s", child.id, bridge.name)
        self.stack.push(child)
        self.state.reset_cursor()
        self.state.jobs = []
        self.force_update()

    def _open_logs(self, job: ViewJob):
        session = TraceSession(next(self._sessions), job)
        self.state.mode = LogsVisible(session)
        pipeline = self.pipeline
        thread = threading.Thread(
            target=self._trace_to_pane,
            args=(session, pipeline),
            name=f"trace-{job.name}",
            daemon=True,
        )
        thread.start()

    def _trace_to_pane(self, session: TraceSession, pipeline: PipelineRef):
        writer = EventWriter(self.events, session.id)
        try:
            stream_job_trace(self.client, writer, pipeline.project_id, pipeline.sha,
                             session.job.name, session.cancel, job_id=session.job.id or None)
        except (GlabError, GitlabError, OSError) as e:
            logger.warning("Trace of %s failed: %s", session.job.name, e)
            if not session.cancel.is_set():
                writer.write(f"\nError: {e}\n")

    def _close_logs(self):
        mode = self.state.mode
        if isinstance(mode, LogsVisible):
            mode.session.cancel.set()
            self.state.mode = Normal()

    def _open_modal(self, action: str, job: ViewJob):
        self.state.mode = ModalVisible(action, job)
        self.paused.set()

    def _close_modal(self):
        self.state.mode = Normal()
        self.paused.clear()

    def _run_action(self, modal: ModalVisible):
        job = modal.job
        project_id = self.pipeline.project_id
        try:
            if modal.action == CANCEL:
                result = self.client.cancel_job(project_id, job.id)
            else:
                result = self.client.play_or_retry_job(project_id, job.id, job.status)
        except (GitlabError, OSError) as e:
            error = JobActionError(f"Failed to {modal.action} {job.name}: {e}")
            logger.error("%s", error)
            self.state.message = str(error)
            return
        self.state.message = ""
        if result:
            self.state.replace_job(ViewJob.from_job(result))
        self.force_update()

    def suspend_to_trace(self, job: ViewJob):
        """Leave full screen mode and follow the job trace until Enter"""
        cancel = threading.Event()
        pipeline = self.pipeline

        def follow():
            try:
                stream_job_trace(self.client, self.output, pipeline.project_id,
                                 pipeline.sha, job.name, cancel, job_id=job.id or None)
            except (GlabError, GitlabError, OSError) as e:
                if not cancel.is_set():
                    self.events.put(Fatal(e))
                return
            if not cancel.is_set():
                self.output.write(RESUME_PROMPT)
                self.output.flush()

        with self.terminal.suspend():
            thread = threading.Thread(target=follow, name=f"trace-{job.name}", daemon=True)
            thread.start()
            self.stdin.readline()
            cancel.set()
        self._dirty = True

    # painting

    def frame_title(self) -> str:
        if len(self.stack) > 1:
            return f"{self.title} › child pipeline #{self.pipeline.id}"
        return self.title

    def draw(self):
        width, height = self.terminal.size()
        canvas = Canvas(width, height)
        self.paint(canvas)
        self.terminal.draw(canvas)
        self._last_draw = time.monotonic()
        self._dirty = False

    def paint(self, canvas: Canvas):
        state = self.state
        draw_frame(canvas, self.frame_title())
        inner = inner_rect(canvas)
        mode = state.mode

        if isinstance(mode, LogsVisible):
            lines = [strip_ansi(line) for line in mode.session.visible_lines()]
            draw_logs(canvas, inner, f" {mode.session.job.name} ", lines)
        elif state.jobs:
            state.boxes = draw_jobs(canvas, state.jobs, state.cur_job, inner)
            try:
                link_jobs(canvas, state.jobs, state.boxes)
            except BoxNotFoundError as e:
                # skip connectors for this frame, the next one is rebuilt from scratch
                logger.warning("%s", e)
        else:
            canvas.print_text(inner.x, inner.y, inner.width, "Loading pipeline jobs...")

        if isinstance(mode, ModalVisible):
            draw_modal(canvas, mode.text, BUTTONS, mode.selected)
        draw_status_line(canvas, state.message)
