"""Saved calculations view: list, inspect, delete, export and import."""

import streamlit as st

from app.schemas import StorageError
from app.services import StorageService


class SavedCalculationsComponent:
    """Component for managing saved calculations."""

    def __init__(self, storage_service: StorageService = None):
        self.storage_service = storage_service or StorageService()

    def render(self) -> None:
        st.subheader("Saved Calculations")

        calculations = self.storage_service.get_all_calculations()
        if not calculations:
            st.info("No saved calculations yet.")
        for calculation in reversed(calculations):
            with st.expander(f"{calculation.name} ({calculation.timestamp[:19].replace('T', ' ')})"):
                st.json(calculation.input_params)
                col1, col2 = st.columns(2)
                with col1:
                    st.download_button(
                        "Export JSON",
                        data=self.storage_service.export_json(calculation.id),
                        file_name=f"calculation_{calculation.id}.json",
                        mime="application/json",
                        key=f"export_{calculation.id}",
                    )
                with col2:
                    if st.button("Delete", key=f"delete_{calculation.id}"):
                        self.storage_service.delete_calculation(calculation.id)
                        st.rerun()

        st.markdown("---")
        if calculations:
            st.download_button(
                "Export All",
                data=self.storage_service.export_json(),
                file_name="all_calculations.json",
                mime="application/json",
            )

        uploaded = st.file_uploader("Import calculations", type=["json"])
        if uploaded is not None:
            try:
                added = self.storage_service.import_json(uploaded.getvalue().decode("utf-8"))
            except (StorageError, UnicodeDecodeError) as e:
                st.error(f"Import failed: {e}")
            else:
                st.success(f"Imported {added} calculation(s)")
