# app.py
from typing import Optional

import streamlit as st
import streamlit.components.v1 as components

from loanchat.config import Config
from loanchat.widget.api_client import ChatApiClient, ChatClientError
from loanchat.widget.chat_panel import ChatPanel, DeliveryStatus


# =====================================================
# Global singletons (cached across Streamlit reruns)
# =====================================================

@st.cache_resource
def get_client() -> ChatApiClient:
    """
    HTTP client for the chat API.
    """
    return ChatApiClient(Config.widget.api_base_url, Config.widget.timeout)


# =====================================================
# Helper functions (UI-level logic only)
# =====================================================

def _get_panel(product_id: str, user_id: Optional[str]) -> ChatPanel:
    """One panel per (product, user), kept in session state."""
    key = f"chat_panel::{product_id}::{user_id or ''}"
    if key not in st.session_state:
        st.session_state[key] = ChatPanel(get_client(), product_id=product_id, user_id=user_id)
    return st.session_state[key]


def _scroll_to_bottom(panel: ChatPanel) -> None:
    if st.session_state.get("last_rendered_revision") == panel.revision:
        return
    st.session_state.last_rendered_revision = panel.revision
    components.html(
        """
        <script>
        const doc = window.parent.document;
        const anchors = doc.querySelectorAll('[data-testid="stChatMessage"]');
        if (anchors.length) anchors[anchors.length - 1].scrollIntoView({behavior: "smooth"});
        </script>
        """,
        height=0,
    )


def _render_transcript(panel: ChatPanel) -> None:
    if not panel.messages and not panel.is_busy:
        st.caption("💬 Ask anything about this loan product, like interest rates or eligibility.")

    for msg in panel.messages:
        with st.chat_message(msg.role):
            st.markdown(msg.content)
            if msg.status == DeliveryStatus.PENDING:
                st.caption("⏳ Sending...")
            elif msg.status == DeliveryStatus.FAILED:
                st.caption("⚠️ Not delivered")
                col_retry, col_discard = st.columns(2)
                if col_retry.button("🔁 Retry", key=f"retry-{msg.id}"):
                    with st.spinner("Thinking..."):
                        panel.retry(msg.id)
                    st.rerun()
                if col_discard.button("🗑️ Discard", key=f"discard-{msg.id}"):
                    panel.discard(msg.id)
                    st.rerun()


# =====================================================
# Page
# =====================================================

st.set_page_config(page_title="Loan Assistant", page_icon="🏦")
st.title("🏦 Loan Product Assistant")

try:
    products = get_client().list_products()
except ChatClientError as e:
    st.error(f"❌ Could not load products: {e}")
    st.stop()

if not products:
    st.info("No products yet. Seed some with `python -m loanchat.scripts.init_db --seed data/products.yaml`.")
    st.stop()

by_id = {p["id"]: p for p in products}
product_id = st.selectbox(
    "Product",
    options=list(by_id),
    format_func=lambda pid: f"{by_id[pid]['name']} · {by_id[pid]['bank']} · {by_id[pid]['rate_apr']}% APR",
)
user_id = st.text_input("User ID (optional)").strip() or None

panel = _get_panel(product_id, user_id)

if st.toggle("🤖 Enquire with AI", value=panel.is_open):
    if not panel.is_open:
        with st.spinner("Loading conversation..."):
            panel.open()
else:
    panel.close()

if panel.is_open:
    st.subheader(f"{by_id[product_id]['name']} Assistant")
    _render_transcript(panel)

    if panel.last_error:
        st.error(f"❌ {panel.last_error}")

    prompt = st.chat_input("Type your message...", disabled=panel.is_busy)
    if prompt:
        # optimistic: shown before the reply arrives
        with st.chat_message("user"):
            st.markdown(prompt)
            st.caption("⏳ Sending...")
        with st.spinner("Thinking..."):
            panel.send(prompt)
        st.rerun()

    _scroll_to_bottom(panel)
