import customtkinter as ctk

from photobooth import config
from photobooth.controllers.app_controller import AppController
from photobooth.services.export_service import AssetExportGateway
from photobooth.services.persistence_service import HttpPersistenceClient
from photobooth.ui.booth_view import BoothView
from photobooth.ui.strip_view import StripView


class PhotoBoothApp(ctk.CTk):
    def __init__(self) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        self.title("Photo Booth")
        self.minsize(900, 760)

        # one screen at a time: booth, then strip preview
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self._booth = BoothView(self)
        self._strip = StripView(self)
        self.show_booth()

        client = HttpPersistenceClient() if config.PERSISTENCE_URL else None
        self._controller = AppController(
            booth=self._booth,
            strip_view=self._strip,
            window=self,
            gateway=AssetExportGateway(client=client),
        )
        self._controller.bind_events()
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    def show_booth(self) -> None:
        self._strip.grid_remove()
        self._booth.grid(row=0, column=0, sticky="nsew", padx=12, pady=12)

    def show_strip(self) -> None:
        self._booth.grid_remove()
        self._strip.grid(row=0, column=0, sticky="nsew", padx=12, pady=12)

    def _on_close(self) -> None:
        self._controller.shutdown()
        self.destroy()
