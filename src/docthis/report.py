import sys
import traceback

from pydantic import BaseModel

from docthis.errors import InternalError


class IssueReport(BaseModel):
    title: str
    body: str


def build_issue_report(error: BaseException, action: str) -> IssueReport:
    """
    Build the diagnostic report offered to the user when *action* failed.
    """
    cause = error.cause if isinstance(error, InternalError) else error
    lines = [
        f"Platform: {sys.platform}",
        f"Python: {sys.version.split()[0]}",
        "",
        "Exception:",
        "".join(traceback.format_exception(type(cause), cause, cause.__traceback__)).rstrip(),
    ]
    return IssueReport(
        title=f"Exception thrown in '{action}': {cause}",
        body="\n".join(lines),
    )
