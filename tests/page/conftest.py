import pytest

from fill_assist.page import SoupDocument

STUDY_PERMIT_FORM = """
<html>
  <head><title>Study permit application</title></head>
  <body>
    <form id="permit" action="/submit" method="POST">
      <input type="hidden" name="csrf" value="t0k3n">
      <input id="dli" name="school" placeholder="School Code" required>
      <input id="uci" name="client_id" placeholder="UCI Number">
      <label for="x">Designated Learning Institution</label>
      <input id="x" name="institution">
      <label>Passport expiry <input type="date" name="expiry"></label>
      <textarea id="notes" name="notes">Arrived in 2023</textarea>
      <select id="province" name="province">
        <option value="ON">Ontario</option>
        <option value="BC" selected>British Columbia</option>
      </select>
      <input type="submit" value="Send">
    </form>
  </body>
</html>
"""


class FakeHandle:
    def __init__(self, loop, when, callback):
        self._loop = loop
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Collects ``call_later`` callbacks and runs them when time is advanced."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay, callback):
        handle = FakeHandle(self, self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds):
        self.now += seconds
        due = [h for h in self.handles if h.when <= self.now and not h.cancelled]
        self.handles = [h for h in self.handles if h not in due]
        for handle in sorted(due, key=lambda h: h.when):
            if not handle.cancelled:
                handle.callback()

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]


@pytest.fixture
def document():
    return SoupDocument(STUDY_PERMIT_FORM, url="https://example.gc.ca/permit")


@pytest.fixture
def loop():
    return FakeLoop()
