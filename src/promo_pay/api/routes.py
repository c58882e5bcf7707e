import atexit
from functools import wraps

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from promo_pay.api.schemas import (
    CountdownStateSchema,
    DismissRequestSchema,
    ErrorResponseSchema,
    OpenSelectorRequestSchema,
    PaymentOptionSchema,
    SearchRequestSchema,
    SelectorStateSchema,
    ToggleRequestSchema,
)
from promo_pay.models.payment_option import ScreenPhase
from promo_pay.services.checkout_session import CheckoutSession

api = Blueprint('api', __name__)

SESSION_KEY = "promo_pay.session"


def _session() -> CheckoutSession:
    return current_app.extensions[SESSION_KEY]


def _error(detail, status):
    return jsonify(ErrorResponseSchema(detail=detail).model_dump()), status


def _option(opt):
    if opt is None:
        return None
    return PaymentOptionSchema(name=opt.name, normalized_search_key=opt.normalized_search_key)


def _state(session: CheckoutSession) -> dict:
    countdown = session.countdown
    selector = session.selector
    selector_state = None
    if selector is not None:
        selector_state = SelectorStateSchema(
            loading_phase=selector.loading_phase.value,
            search_text=selector.search_text,
            all_options=[_option(o) for o in selector.all_options],
            displayed_options=[_option(o) for o in selector.displayed_options],
            selected=_option(selector.selected),
            affirmative_label=selector.affirmative_label(),
        )
    if countdown.screen_phase is ScreenPhase.FINISHED:
        message = countdown.finished_message()
    else:
        message = countdown.countdown_message()
    return CountdownStateSchema(
        remaining_seconds=countdown.remaining_seconds,
        screen_phase=countdown.screen_phase.value,
        is_selector_open=countdown.is_selector_open,
        selected_option=_option(countdown.selected_option),
        can_finish=countdown.can_finish,
        message=message,
        selector=selector_state,
    ).model_dump()


def _parse(schema):
    return schema.model_validate(request.get_json(silent=True) or {})


def ui_thread(view):
    """Run the view under the session lock, after draining ticks and fetch results."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        session = _session()
        with session.lock:
            session.pump()
            try:
                return view(session, *args, **kwargs)
            except ValidationError as e:
                return _error(str(e), 400)
    return wrapper


@api.route('/state', methods=['GET'])
@ui_thread
def get_state(session):
    return jsonify(_state(session)), 200


@api.route('/selector/open', methods=['POST'])
@ui_thread
def open_selector(session):
    data = _parse(OpenSelectorRequestSchema)
    session.countdown.open_selector(data.open)
    return jsonify(_state(session)), 200


def _open_selector(session):
    selector = session.selector
    if selector is None:
        return None, _error("Open the payment selector first", 409)
    return selector, None


@api.route('/selector/search', methods=['POST'])
@ui_thread
def search(session):
    selector, error = _open_selector(session)
    if error:
        return error
    data = _parse(SearchRequestSchema)
    selector.set_search_text(data.text)
    return jsonify(_state(session)), 200


@api.route('/selector/toggle', methods=['POST'])
@ui_thread
def toggle(session):
    selector, error = _open_selector(session)
    if error:
        return error
    data = _parse(ToggleRequestSchema)
    option = selector.find_option(data.name)
    if option is None:
        return _error(f"Unknown payment option '{data.name}'", 404)
    selector.toggle_select(option)
    return jsonify(_state(session)), 200


@api.route('/selector/refresh', methods=['POST'])
@ui_thread
def refresh(session):
    selector, error = _open_selector(session)
    if error:
        return error
    selector.refresh()
    return jsonify(_state(session)), 202


@api.route('/selector/dismiss', methods=['POST'])
@ui_thread
def dismiss(session):
    selector, error = _open_selector(session)
    if error:
        return error
    data = _parse(DismissRequestSchema)
    selector.dismiss(data.confirm)
    return jsonify(_state(session)), 200


@api.route('/finish', methods=['POST'])
@ui_thread
def finish(session):
    if not session.countdown.can_finish:
        return _error("Select a payment option before finishing", 409)
    session.countdown.finish()
    return jsonify(_state(session)), 200


def register_routes(app, session=None):
    session = session or CheckoutSession(app.config)
    app.extensions[SESSION_KEY] = session
    # the countdown thread lives as long as the process
    atexit.register(session.close)
    app.register_blueprint(api)
