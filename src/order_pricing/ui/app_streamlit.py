"""
Streamlit UI for the Order Pricing Pipeline.

Features:
- Editable line items with data grid
- Shipping method, destination country and coupon controls
- Reorderable stage chain to compare totals
- Per-stage trace of the running total
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from order_pricing.engine import (
    OrderBuilder,
    PricingError,
    ShippingMethod,
    build_pipeline,
    calculate_with_trace,
    stages_from_config,
)
from order_pricing.config.settings import get_settings
from order_pricing.policy.tax_rates import TaxRateTable
from order_pricing.ui.formatting import format_money


st.set_page_config(
    page_title="Order Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_settings_cached():
    """Get cached settings."""
    return get_settings()


@st.cache_resource
def get_tax_table():
    """Get cached tax rate table."""
    settings = get_settings_cached()
    return TaxRateTable(settings.tax_rates_csv, default_rate=settings.default_tax_rate)


settings = get_settings_cached()
tax_table = get_tax_table()

STAGE_LABELS = {
    'shipping': "🚚 Shipping fee",
    'tax': "🧾 Tax",
    'coupon_percent': "🏷️ Coupon (%)",
    'coupon_amount': "💵 Coupon (amount)",
}


# ============================================================================
# SIDEBAR: Order Context
# ============================================================================
with st.sidebar:
    st.header("📦 Order Context")

    with st.container(border=True):
        shipping_method = st.radio(
            "Shipping Method",
            [m.value for m in ShippingMethod],
            format_func=str.title,
            horizontal=True,
        )
        countries = sorted(tax_table.rates_df['country'].tolist()) or ["US"]
        country = st.selectbox("Destination Country", countries, index=countries.index("US") if "US" in countries else 0)
        st.caption(f"Tax rate: {tax_table.rate_for_country(country) * 100:.2f}%")

    st.divider()

    st.subheader("Stages")
    coupon_percent = st.number_input("Coupon %", min_value=0.0, max_value=100.0, value=10.0, step=1.0)
    coupon_amount = st.number_input("Coupon amount", min_value=0.0, value=0.0, step=5.0)
    order_labels = st.multiselect(
        "Stage order (innermost first)",
        options=list(STAGE_LABELS.keys()),
        default=['shipping', 'tax', 'coupon_percent'],
        format_func=lambda k: STAGE_LABELS[k],
    )


# ============================================================================
# MAIN CONTENT
# ============================================================================
st.title("Order Pricing")

if 'lines' not in st.session_state:
    st.session_state.lines = pd.DataFrame([
        {'SKU': 'SKU-001', 'Quantity': 2, 'Unit Price': 50.0},
        {'SKU': 'SKU-002', 'Quantity': 1, 'Unit Price': 100.0},
    ])

col1, col2 = st.columns([1.6, 1.4], gap="large")

with col1:
    st.subheader("Line Items")
    edited_df = st.data_editor(
        st.session_state.lines,
        use_container_width=True,
        num_rows="dynamic",
        column_config={
            "SKU": st.column_config.TextColumn("SKU"),
            "Quantity": st.column_config.NumberColumn("Quantity", min_value=1, step=1),
            "Unit Price": st.column_config.NumberColumn("Unit Price", min_value=0.0, format="$%.2f"),
        },
        hide_index=True,
        key="lines_editor"
    )

with col2:
    st.subheader("Quote Summary")

    with st.container(border=True):
        specs = []
        for key in order_labels:
            if key == 'coupon_percent':
                specs.append({'type': key, 'percent': str(coupon_percent / 100)})
            elif key == 'coupon_amount':
                specs.append({'type': key, 'amount': str(coupon_amount)})
            else:
                specs.append({'type': key})

        try:
            builder = OrderBuilder().with_shipping(shipping_method).with_country(country)
            for _, row in edited_df.dropna(subset=['SKU', 'Quantity', 'Unit Price']).iterrows():
                builder.add_item(row['SKU'], int(row['Quantity']), str(row['Unit Price']))
            order = builder.build()

            pipeline = build_pipeline(
                stages_from_config(specs, tax_rates=tax_table, shipping_fees=settings.shipping_fees)
            )
            result = calculate_with_trace(pipeline, order)
        except PricingError as e:
            st.error(f"Cannot price order: {e}")
            st.stop()

        m1, m2 = st.columns(2)
        m1.metric("Total", format_money(result.total))
        m2.metric("Items", sum(item.quantity for item in order.items))

        st.divider()
        trace_df = pd.DataFrame([
            {'Stage': t.step, 'Detail': t.description, 'Running Total': t.value}
            for t in result.trace
        ])
        st.dataframe(trace_df, use_container_width=True, hide_index=True)

        st.download_button(
            "📥 CSV",
            data=trace_df.to_csv(index=False),
            file_name="quote_trace.csv",
            mime="text/csv",
            use_container_width=True
        )
