# tests/helpers.py
import threading

SHA = "0123456789abcdef0123456789abcdef01234567"


def player_row(cls, pid, fc, role, name, cells=None):
    cells = cells or ["Europe", "vs", "1", "0", "5012", "5000"]
    tds = "".join(f"<td>{c}</td>" for c in cells)
    return (
        f'<tr class="{cls}">'
        f'<td title="pid={pid}"><a data-href="/stats/mkw/list/p{pid}">{fc}</a></td>'
        f"<td>{role}</td>{tds}"
        f'<td><span class="mii-font">{name}</span></td>'
        f"</tr>"
    )


SAMPLE_HTML = f"""
<html><body>
<table class="table11">
  <tr class="tr2"><th>Room</th><th>Players</th></tr>
  <tr class="tr0"><td>stray row before any room</td></tr>
  <tr id="r1001">
    <th colspan="9">
      <a data-href="/stats/mkw/list/r1001">WA-1001</a>
      Private room   (created 2021-01-01 12:00),
      last track: <a data-href="https://ct.wiimm.de/i/4711">Luigi Circuit</a>
    </th>
  </tr>
  <tr class="tr3"><td>legend</td></tr>
  {player_row("tr0", "600000001", "1234-5678-9012", "1. Host", "Mario")}
  {player_row("tr1", "600000002", "2222-3333-4444", "2. Guest", "Luigi")}
  <tr id="r1002">
    <th colspan="9">
      <a data-href="/stats/mkw/list/r1002">WA-1002</a>
      Worldwide room (created 2021-01-01 12:05), SHA1: {SHA}
    </th>
  </tr>
  {player_row("tr0", "600000003", "5555-6666-7777", "1. Host", "Peach")}
  <tr class="tr1"><td>too</td><td>short</td></tr>
</table>
</body></html>
"""


class FakeSession:
    """Stands in for BrowserSession; records every call."""

    def __init__(self, html=SAMPLE_HTML, error=None, ready_error=None, gate=None):
        self.html = html
        self.error = error
        self.ready_error = ready_error
        self.gate = gate
        self.started = threading.Event()
        self.ready_calls = 0
        self.fetches = []

    def ensure_ready(self):
        self.ready_calls += 1
        if self.ready_error is not None:
            raise self.ready_error

    def fetch_document(self, url, timeout_ms):
        self.fetches.append((url, timeout_ms))
        self.started.set()
        if self.gate is not None:
            assert self.gate.wait(5), "test never released the fetch"
        if self.error is not None:
            raise self.error
        return self.html


class FakeFallback:
    def __init__(self, html=None):
        self.html = html
        self.requests = []

    def load_local_document(self, name):
        self.requests.append(name)
        return self.html
