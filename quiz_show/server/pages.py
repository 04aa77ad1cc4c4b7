"""HTML pages served to the presentation browser."""

from __future__ import annotations

from html import escape

from quiz_show.constants.about import APP_NAME
from quiz_show.core.markdown_math_renderer import MATHJAX_SCRIPT
from quiz_show.core.models import Round

_BASE_STYLE = """
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0; min-height: 100vh; display: flex; flex-direction: column; background-size: cover; background-position: center; }
      main { flex: 1; display: flex; flex-direction: column; gap: 1.5rem; padding: 2rem 3rem; }
      .card { background: rgba(17, 26, 48, 0.88); border-radius: 0.75rem; padding: 1.5rem 2rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.4); }
      .hidden { display: none !important; }
      a.button, button.button { display: inline-block; border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1.1rem; background: #1f9aa5; color: #fff; cursor: pointer; text-decoration: none; }
      a.button:hover, button.button:hover { background: #16808a; }
      .muted { color: #94a3b8; }
"""


def render_round_list_page(rounds: list[Round]) -> str:
    if rounds:
        items = "\n".join(
            f'        <li><a class="button" href="/quiz/{escape(round_.id)}/start">{escape(round_.name)}</a></li>'
            for round_ in rounds
        )
        body = f'      <ul class="round-list">\n{items}\n      </ul>'
    else:
        body = '      <p class="muted">The show file does not contain any rounds.</p>'
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{APP_NAME}</title>
    <style>{_BASE_STYLE}
      .round-list {{ list-style: none; padding: 0; display: flex; flex-direction: column; gap: 1rem; }}
    </style>
  </head>
  <body>
    <main class="card">
      <h1>{APP_NAME}</h1>
      <p class="muted">Choose a round to present.</p>
{body}
    </main>
  </body>
</html>"""


def render_round_intro_page(round_: Round, audio_url: str | None, background_url: str | None) -> str:
    background = f"background-image: url('{escape(background_url)}');" if background_url else ""
    audio = (
        f'<audio id="round-audio" src="{escape(audio_url)}" preload="auto"></audio>\n'
        '      <button class="button" id="play-audio">Play round theme</button>'
        if audio_url
        else '<p class="muted">This round has no theme audio.</p>'
    )
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{escape(round_.name)} · {APP_NAME}</title>
    <style>{_BASE_STYLE}</style>
  </head>
  <body style="{background}">
    <main>
      <section class="card">
        <h1>{escape(round_.name)}</h1>
        {audio}
        <p><a class="button" href="/quiz/{escape(round_.id)}/play?question=0&step=0">Start round</a></p>
        <p><a class="muted" href="/quiz/start">All rounds</a></p>
      </section>
    </main>
    <script>
      const playButton = document.getElementById('play-audio');
      const roundAudio = document.getElementById('round-audio');
      if (playButton && roundAudio) {{
        playButton.addEventListener('click', () => {{
          roundAudio.currentTime = 0;
          roundAudio.play().catch(error => console.error('Error playing round audio:', error));
        }});
      }}
      window.addEventListener('pagehide', () => roundAudio && roundAudio.pause());
    </script>
  </body>
</html>"""


PRESENTATION_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>QuizShow</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>""" + _BASE_STYLE + """
      #intro, #question-text { font-size: 2rem; line-height: 1.4; }
      #category { text-transform: uppercase; letter-spacing: 0.1em; }
      .answers { display: grid; grid-template-columns: repeat(3, 1fr); gap: 1rem; }
      .answer { font-size: 1.6rem; padding: 1.25rem; border-radius: 0.75rem; background: #1e293b; border: 3px solid transparent; transition: background 120ms ease, border 120ms ease; }
      .answer.lit { border-color: #facc15; background: #3b3412; }
      .answer.correct { background: #15803d; border-color: #4ade80; }
      .answer.dimmed { opacity: 0.45; }
      #explanation img { max-width: 100%; border-radius: 0.5rem; }
      #status-line { padding: 0.5rem 3rem; font-size: 0.9rem; }
    </style>
    <script>
      window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] }, svg: { fontCache: 'global' } };
    </script>
    <script defer src=\"""" + MATHJAX_SCRIPT + """\"></script>
  </head>
  <body>
    <main id="stage">
      <section class="card" id="loading-card"><p>Loading round…</p></section>
      <section class="card hidden" id="finished-card">
        <h2 id="finished-title">Round complete</h2>
        <p id="finished-message" class="muted"></p>
        <a class="button" href="/quiz/start">Back to round selection</a>
      </section>
      <section class="card hidden" id="question-card">
        <p id="category" class="muted"></p>
        <div id="intro"></div>
        <div id="question-text"></div>
      </section>
      <section class="answers hidden" id="answers"></section>
      <section class="card hidden" id="explanation"></section>
    </main>
    <p id="status-line" class="muted"></p>
    <script>
      const POLL_INTERVAL_MS = 150;
      const stage = {
        loading: document.getElementById('loading-card'),
        finished: document.getElementById('finished-card'),
        finishedTitle: document.getElementById('finished-title'),
        finishedMessage: document.getElementById('finished-message'),
        question: document.getElementById('question-card'),
        category: document.getElementById('category'),
        intro: document.getElementById('intro'),
        questionText: document.getElementById('question-text'),
        answers: document.getElementById('answers'),
        explanation: document.getElementById('explanation'),
        statusLine: document.getElementById('status-line'),
      };

      let appliedWriteToken = null;
      let cueSequence = 0;
      let lastRenderKey = null;
      let pollHandle = null;
      let latestState = null;
      const audioElements = new Map();

      function setVisibility(element, isVisible) {
        element.classList.toggle('hidden', !isVisible);
      }

      function currentLocation() {
        return window.location.pathname + window.location.search;
      }

      async function postJson(url, body) {
        const response = await fetch(url, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body || {}),
        });
        if (!response.ok) {
          console.error(`Request to ${url} failed with status ${response.status}`);
        }
        return response;
      }

      async function reportLocation(token, initial) {
        await postJson('/api/navigation', {
          location: currentLocation(),
          token: token,
          initial: Boolean(initial),
        });
        await refresh();
      }

      async function advance() {
        await postJson('/api/advance');
        await refresh();
      }

      function applyNavigationWrite(navigation) {
        if (!navigation || navigation.token === appliedWriteToken) {
          return;
        }
        appliedWriteToken = navigation.token;
        if (navigation.url === currentLocation()) {
          history.replaceState({ token: navigation.token }, '', navigation.url);
        } else {
          history.pushState({ token: navigation.token }, '', navigation.url);
        }
        reportLocation(navigation.token);
      }

      function audioFor(cue) {
        if (!audioElements.has(cue.cue)) {
          const element = new Audio(cue.src);
          element.loop = cue.cue === 'BLINK_LOOP';
          audioElements.set(cue.cue, element);
        }
        return audioElements.get(cue.cue);
      }

      function playCues(cues) {
        for (const cue of cues) {
          cueSequence = Math.max(cueSequence, cue.sequence);
          const element = audioFor(cue);
          if (cue.action === 'play') {
            element.currentTime = 0;
            element.play().catch(error => console.warn(`Audio ${cue.cue} playback failed:`, error));
          } else {
            element.pause();
            element.currentTime = 0;
          }
        }
      }

      function renderAnswers(state) {
        const question = state.question;
        const correctShown = question.highlight_index !== null;
        stage.answers.innerHTML = '';
        question.answers.forEach((answer, index) => {
          const tile = document.createElement('div');
          tile.className = 'answer';
          tile.innerHTML = answer.html;
          if (state.lit_index === index) tile.classList.add('lit');
          if (correctShown) tile.classList.add(index === question.highlight_index ? 'correct' : 'dimmed');
          stage.answers.appendChild(tile);
        });
        setVisibility(stage.answers, question.answers.length > 0);
      }

      function render(state) {
        const background = state.round && state.round.background_url;
        document.body.style.backgroundImage = background ? `url('${background}')` : '';
        const finished = state.status === 'finished';
        setVisibility(stage.loading, state.status === null || state.status === 'loading');
        setVisibility(stage.finished, finished);
        if (finished) {
          stage.finishedTitle.textContent = state.load_error ? 'Round unavailable' : 'Round complete';
          stage.finishedMessage.textContent = state.load_error || '';
        }
        const question = state.status === 'active' ? state.question : null;
        setVisibility(stage.question, Boolean(question));
        if (!question) {
          setVisibility(stage.answers, false);
          setVisibility(stage.explanation, false);
          stage.statusLine.textContent = '';
          return;
        }
        const renderKey = `${question.id}|${state.step_kind}|${state.position.step_index}`;
        stage.category.textContent = question.category || '';
        if (renderKey !== lastRenderKey) {
          stage.intro.innerHTML = state.step_kind === 'intro' ? question.introduction_html : '';
          stage.questionText.innerHTML = question.text_html;
          stage.explanation.innerHTML = question.explanation_html +
            (question.explanation_image_url ? `<img src="${question.explanation_image_url}" alt="" />` : '');
          setVisibility(stage.explanation, state.step_kind === 'explanation');
          lastRenderKey = renderKey;
          if (window.MathJax && window.MathJax.typesetPromise) {
            window.MathJax.typesetPromise();
          }
        }
        renderAnswers(state);
        stage.statusLine.textContent =
          `Question ${question.number}/${state.question_count} · step ${state.position.step_index} (${state.step_kind}) · lights ${state.lighting_mode}`;
      }

      async function refresh() {
        try {
          const response = await fetch(`/api/state?cue_since=${cueSequence}`);
          const state = await response.json();
          latestState = state;
          applyNavigationWrite(state.navigation);
          playCues(state.cues);
          render(state);
        } catch (error) {
          console.error('Error fetching presentation state:', error);
        }
      }

      window.addEventListener('popstate', event => {
        const token = event.state && typeof event.state.token === 'number' ? event.state.token : null;
        reportLocation(token);
      });
      window.addEventListener('pagehide', () => {
        navigator.sendBeacon('/api/session/teardown');
      });
      document.addEventListener('click', event => {
        if (event.target.closest('a')) return;
        advance();
      });
      document.addEventListener('keydown', event => {
        if (event.key === ' ' || event.key === 'ArrowRight' || event.key === 'Enter') {
          event.preventDefault();
          advance();
        }
      });

      window.quizShow = {
        advance: advance,
        refresh: refresh,
        lightingMode: () => (latestState ? latestState.lighting_mode : null),
      };

      reportLocation(null, true).then(() => {
        pollHandle = setInterval(refresh, POLL_INTERVAL_MS);
      });
    </script>
  </body>
</html>
"""
