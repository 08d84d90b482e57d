"""Try, catch and finally as a state machine fragment."""

from aws_cdk import aws_stepfunctions as sfn
from constructs import Construct

from .constants import DEFAULT_TRY_ERROR_PATH
from .naming import create_state_name


class TryTask(sfn.StateMachineFragment):
    """Run ``try_process`` with optional error handling and a finally step.

    ``try_process`` runs inside a single-branch ``Parallel`` state named
    ``id`` so errors raised anywhere in the chain can be caught. Routing:

    * ``catch_process`` receives errors matching ``catch_errors``.
    * ``finally_process`` runs after success and after ``catch_process``.
    * With ``finally_process`` but no ``catch_process``, every matching error
      is stored at ``finally_error_path``, ``finally_process`` runs, and the
      error is raised again from a fail state.

    The fragment ends after ``finally_process`` when there is one, otherwise
    after the ``Parallel`` state and after ``catch_process``.
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        try_process: sfn.IChainable,
        catch_process: sfn.IChainable | None = None,
        catch_errors: list[str] | None = None,
        catch_result_path: str | None = None,
        finally_process: sfn.IChainable | None = None,
        finally_error_path: str = DEFAULT_TRY_ERROR_PATH,
        comment: str | None = None,
        input_path: str | None = None,
        result_path: str | None = None,
    ) -> None:
        rethrows = finally_process is not None and catch_process is None
        if rethrows:
            check_name = create_state_name(id, "Check Error")
            rethrow_name = create_state_name(id, "Rethrow")
            done_name = create_state_name(id, "Finally Done")

        super().__init__(scope, id)

        self.parallel = sfn.Parallel(
            self,
            id,
            comment=comment,
            input_path=input_path,
            output_path="$[0]",
            result_path=result_path,
        )
        self.parallel.branch(try_process)

        if catch_process is not None:
            self.parallel.add_catch(
                catch_process, errors=catch_errors, result_path=catch_result_path
            )

        if finally_process is None:
            self._end_states = [self.parallel]
            if catch_process is not None:
                self._end_states += list(sfn.Chain.start(catch_process).end_states)
            return

        if catch_process is not None:
            sfn.Chain.start(catch_process).next(finally_process)
            self._end_states = list(self.parallel.next(finally_process).end_states)
            return

        self.parallel.add_catch(
            finally_process,
            errors=catch_errors,
            result_path=finally_error_path,
        )
        rethrow = sfn.Fail(
            self,
            rethrow_name,
            error_path=f"{finally_error_path}.Error",
            cause_path=f"{finally_error_path}.Cause",
        )
        done = sfn.Pass(self, done_name)
        self.parallel.next(finally_process).next(
            sfn.Choice(self, check_name)
            .when(sfn.Condition.is_present(finally_error_path), rethrow)
            .otherwise(done)
        )
        self._end_states = [done]

    @property
    def start_state(self) -> sfn.State:
        return self.parallel

    @property
    def end_states(self) -> list[sfn.INextable]:
        return self._end_states

    def add_catch(
        self,
        handler: sfn.IChainable,
        *,
        errors: list[str] | None = None,
        result_path: str | None = None,
    ) -> "TryTask":
        """Route errors escaping the try branch to ``handler``."""
        self.parallel.add_catch(handler, errors=errors, result_path=result_path)
        return self
