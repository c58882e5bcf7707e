import os
import sys
import time
import importlib

import streamlit as st

st.set_page_config(page_title="Promo checkout", page_icon="⏳")


# =========================================================
#  GENERAL HELPERS
# =========================================================

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def rerun():
    """Compatibility helper for rerunning the app."""
    try:
        st.rerun()
    except AttributeError:
        st.experimental_rerun()


# =========================================================
#  DYNAMIC IMPORT HELPER (promo_pay)
# =========================================================

def load_promo_pay():
    """
    Make sure src/ is on sys.path and then import promo_pay modules.
    Shows an error in the UI if something is wrong.
    """
    src_dir = os.path.join(BASE_DIR, "src")

    if src_dir not in sys.path:
        sys.path.insert(0, src_dir)

    try:
        session_mod = importlib.import_module("promo_pay.services.checkout_session")
        option_mod = importlib.import_module("promo_pay.models.payment_option")
        config_mod = importlib.import_module("promo_pay.config")
        helpers_mod = importlib.import_module("promo_pay.utils.helpers")
    except ModuleNotFoundError as e:
        st.error(f"❌ Could not import promo_pay: {e}")
        st.stop()

    return (
        session_mod.CheckoutSession,
        option_mod.LoadingPhase,
        option_mod.ScreenPhase,
        config_mod.Config,
        helpers_mod.configure_logging,
    )


CheckoutSession, LoadingPhase, ScreenPhase, Config, configure_logging = load_promo_pay()
configure_logging(Config.LOG_LEVEL)


# =========================================================
#  SESSION STATE INIT
# =========================================================

def init_state():
    if "checkout" not in st.session_state:
        st.session_state.checkout = CheckoutSession(Config)


def reset_flow():
    st.session_state.checkout.close()
    del st.session_state.checkout
    init_state()


init_state()


# =========================================================
#  VIEWS
# =========================================================

def view_finished(countdown):
    st.title(countdown.finished_message())
    if countdown.selected_option:
        st.caption(f"Paid with {countdown.selected_option.name}")
    if st.button("Start over"):
        reset_flow()
        rerun()


def view_selector(countdown):
    selector = countdown.selector

    header_col, action_col = st.columns([3, 1])
    header_col.subheader("Payment info")
    if action_col.button(selector.affirmative_label(), key="selector_dismiss"):
        selector.dismiss(True)
        rerun()

    if selector.loading_phase is LoadingPhase.LOADING:
        with st.spinner("Loading Payment options..."):
            time.sleep(0.5)
        rerun()
        return

    search = st.text_input(
        "🔍 Search payment methods",
        value=selector.search_text,
        key="selector_search",
    )
    if search != selector.search_text:
        selector.set_search_text(search)

    if st.button("🔄 Refresh list", key="selector_refresh"):
        selector.refresh()
        rerun()

    if not selector.displayed_options:
        st.info("No payment methods match your search.")

    for opt in selector.displayed_options:
        is_selected = opt.same_as(selector.selected)
        label = f"✅ {opt.name}" if is_selected else opt.name
        if st.button(label, key=f"option_{opt.name}", use_container_width=True):
            selector.toggle_select(opt)
            rerun()


def view_countdown(countdown):
    st.title(countdown.countdown_message())

    if countdown.selected_option:
        st.success(f"Selected: **{countdown.selected_option.name}**")

    if countdown.is_selector_open:
        with st.container(border=True):
            view_selector(countdown)
    elif st.button("Open payment", use_container_width=True):
        countdown.open_selector(True)
        rerun()

    # Visible only once a payment type was confirmed
    if countdown.can_finish and st.button("Finish", type="primary", use_container_width=True):
        countdown.finish()
        rerun()


# =========================================================
#  MAIN
# =========================================================

def main():
    session = st.session_state.checkout

    with session.lock:
        session.pump()
        countdown = session.countdown
        if countdown.screen_phase is ScreenPhase.FINISHED:
            view_finished(countdown)
            return
        view_countdown(countdown)

    # keep the countdown text moving
    if countdown.is_running:
        time.sleep(1)
        rerun()


main()
