# pipeline_doctor

`pipeline_doctor` is a small service that listens for CI job webhooks from
GitHub and GitLab, reads the job's log, and works out what should be done
about a failure: retry the job, leave a comment on the pull request, and so on.

## How it works

1. **Receive** – two HTTP endpoints accept webhook deliveries:
   - `POST /github/webhook` checks the `X-Hub-Signature-256` HMAC-SHA256
     signature (`sha256=<hex digest>`) against `GITHUB_WEBHOOK_SECRET`, then
     parses a `workflow_job` payload.
   - `POST /gitlab/webhook` checks the `X-Gitlab-Token` header against
     `GITLAB_WEBHOOK_TOKEN`, then parses a job payload.

   A valid payload becomes a `NormalizedEvent` and is put on a queue; the
   endpoint replies `202 Accepted`. A failed check or a malformed payload gets
   a plain-text error with the status of the matching `AppError`.
2. **Configure** – for each event the agent looks for `.optimizer.yml`, then
   `.optimizer.json`, in the repository at the event's commit (through the
   GitHub contents API or the gitlab.com files API). If neither is found it
   uses the defaults: `allow_flaky_retry: true`, `max_job_duration: 3600`.
3. **Analyze** – the job log at the event's `logs_uri` is downloaded. For a
   failed job, the first line whose lower-cased text matches
   `(test|spec).*failed` is reported as a `FlakyTest`, named by the line's
   first word.
4. **Plan** – each diagnosis becomes a list of actions such as `RetryJob` and
   `CommentOnPR`, which the agent logs.

## Installation

```
pip install .
```

## Running the service

Both webhook credentials must be set, or the command prints an error and
exits with status 1:

```
export GITHUB_WEBHOOK_SECRET=secret
export GITLAB_WEBHOOK_TOKEN=token
pipeline-doctor
```

The server listens on `0.0.0.0:3000` by default; `--host` and `--port`
change that. Other environment variables:

- `GITHUB_TOKEN` – sent as a bearer token when downloading logs from
  `github.com` URLs.
- `GITLAB_TOKEN` – required to read configuration files from GitLab
  projects; without it, GitLab events fail with a `ConfigError`.

## Repository configuration

Add `.optimizer.yml` (or `.optimizer.json`) to the root of the repository.
Both fields must be present:

```yaml
allow_flaky_retry: false
max_job_duration: 1800
```

When `allow_flaky_retry` is false, a flaky test gets a comment but no retry.

## Using it as a library

```python
import asyncio
from pipeline_doctor.app import create_app
from pipeline_doctor.agent import Agent

queue = asyncio.Queue(maxsize=100)
app = create_app(queue)      # a Starlette application
agent = Agent(queue)         # await agent.run(); put None on the queue to stop it
```

`Agent.process_event(event)` handles one event and returns the planned
actions. The lower-level pieces can be used on their own:

- `pipeline_doctor.github.verify_signature` and `parse_github_payload`
- `pipeline_doctor.gitlab.verify_token` and `parse_gitlab_payload`
- `pipeline_doctor.webhook.process_github` and `process_gitlab`
- `pipeline_doctor.config_loader.load_for_event` and `parse_config_bytes`
- `pipeline_doctor.analyzer.fetch_log_lines`, `detect_flaky_test` and
  `analyze_event`
- `pipeline_doctor.planner.plan_actions`

The diagnoses (`FlakyTest`, `LongRuntime`, `CacheMiss`, `InfraFailure`,
`InefficientJobOrder`, `ConfigurationViolation`) and actions (`RetryJob`,
`CommentOnPR`, `SendEmail`, `SendSlack`) are frozen dataclasses in
`pipeline_doctor.diagnosis`.

## Errors

Failures raise subclasses of `pipeline_doctor.errors.AppError`, each with an
HTTP status: `Unauthorized` (401), `BadRequest` and `RequestError` (400),
`ConfigError` and `InternalError` (500), and `HttpClientError` (502).

## What it does not do

Planned actions are only logged. The package does not retry jobs, post
comments, or send e-mail or chat messages. Of the diagnoses, analysis only
ever produces `FlakyTest`; the planner handles the others when given them.
Events are held in memory and are lost when the service stops.

## Development

```
pip install -e ".[test]"
pytest
```