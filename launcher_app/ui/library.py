# launcher_app/ui/library.py

import asyncio
import streamlit as st


def installed_paths(downloads) -> dict:
    """
    Latest install path per game, taken from the download ledger.
    """
    paths = {}
    for record in downloads:
        if record["status"] == "installed" and record.get("installPath"):
            paths[record["gameId"]] = record["installPath"]
    return paths


def library_page(launcher):
    st.title("📚 Library")

    library = asyncio.run(launcher.get_library())
    if not library["success"]:
        st.error(library["error"])
        return
    if not library["data"]:
        st.info("Your library is empty. Install something from the store.")
        return

    downloads = asyncio.run(launcher.get_downloads())
    paths = installed_paths(downloads["data"]) if downloads["success"] else {}

    for game in library["data"]:
        with st.container(border=True):
            st.subheader(f"{game.get('emoji') or '🎮'} {game['name']}")
            game_path = paths.get(game["id"])
            if not game_path:
                st.caption("Not installed on this machine")
                continue

            st.caption(game_path)
            if st.button("▶️ Launch", key=f"launch_{game['id']}"):
                result = asyncio.run(launcher.launch_game(game["executable"], game_path))
                if result["success"]:
                    st.success(result["data"]["message"])
                else:
                    st.error(result["error"])


def downloads_page(launcher):
    st.title("📥 Downloads")

    downloads = asyncio.run(launcher.get_downloads())
    if not downloads["success"]:
        st.error(downloads["error"])
        return
    if not downloads["data"]:
        st.info("No downloads yet.")
        return

    rows = [
        {
            "Game": record["gameName"],
            "Status": record["status"],
            "Progress": f"{record['progress']}%",
            "Created": record["createdAt"],
            "Installed": record.get("installedAt") or "",
        }
        for record in reversed(downloads["data"])
    ]
    st.table(rows)


def settings_page(launcher):
    st.title("⚙️ Settings")

    current = str(launcher.session.install_path)
    new_path = st.text_input("Install directory", value=current)
    if st.button("💾 Save") and new_path != current:
        result = asyncio.run(launcher.change_install_path(new_path))
        if result["success"]:
            st.success(f"Games will be installed in {result['data']['path']}")
        else:
            st.error(result["error"])
