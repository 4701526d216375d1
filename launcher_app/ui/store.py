# launcher_app/ui/store.py

import asyncio
import streamlit as st


def store_page(launcher):
    st.title("🛒 Store")

    games = asyncio.run(launcher.get_games())
    if not games["success"]:
        st.error(games["error"])
        return
    if not games["data"]:
        st.info("No games available yet.")
        return

    library = asyncio.run(launcher.get_library())
    owned = {game["id"] for game in library["data"]} if library["success"] else set()

    for game in games["data"]:
        with st.container(border=True):
            st.subheader(f"{game.get('emoji') or '🎮'} {game['name']}")
            if game.get("description"):
                st.write(game["description"])
            if game.get("sizeLabel"):
                st.caption(f"Size: {game['sizeLabel']}")

            label = "🔁 Reinstall" if game["id"] in owned else "⬇️ Install"
            if st.button(label, key=f"install_{game['id']}"):
                install(launcher, game)


def install(launcher, game):
    bar = st.progress(0, text=f"Downloading {game['name']}...")

    def on_progress(event):
        bar.progress(event.percent, text=f"Downloading {game['name']}... {event.percent}%")

    with st.spinner("Installing..."):
        result = asyncio.run(launcher.install_game(game["id"], on_progress))

    if result["success"]:
        bar.progress(100, text="Done")
        st.success(f"✅ {game['name']} installed in {result['data']['installPath']}")
    else:
        st.error(f"❌ Install failed: {result['error']}")
