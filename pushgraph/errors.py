"""Error taxonomy for the push-to-task-graph pipeline."""


class PushgraphError(RuntimeError):
    pass


class TemplateFetchError(PushgraphError):
    def __init__(self, url: str, cause: BaseException) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Could not fetch template at {url}: {cause}")


class TemplateError(PushgraphError):
    """Template could not be turned into a task graph; triggers the error task."""


class TemplateParseError(TemplateError):
    pass


class UnsupportedTemplateVersionError(TemplateError):
    def __init__(self, version: object) -> None:
        self.version = version
        super().__init__(f"Unrecognized .taskcluster.yml version: {version!r}")


class TaskSubmissionError(PushgraphError):
    def __init__(self, task_id: str, project: str, cause: BaseException) -> None:
        self.task_id = task_id
        self.project = project
        self.cause = cause
        super().__init__(f"Error creating task {task_id} for project {project}: {cause}")


class PushLogError(PushgraphError):
    pass


class ProjectConfigError(PushgraphError):
    pass
