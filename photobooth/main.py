"""Точка входа в приложение."""
from photobooth.app import PhotoBoothApp
from photobooth.logging_config import setup_logging


def main() -> None:
    """Настраивает логирование, создаёт и запускает главное окно фотобудки."""
    setup_logging()
    app = PhotoBoothApp()
    app.mainloop()


if __name__ == "__main__":
    main()
