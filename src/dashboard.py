#!/usr/bin/env python3
"""
Spotify: Listening History Report
This Streamlit app walks through a user's Spotify extended streaming history:
hours per year, top artists, artist rank over time, top tracks, podcasts and
the most replayed episodes.
"""

import logging

import streamlit as st
import matplotlib.pyplot as plt

from listening.charts import (
    plot_artist_rank_over_time, plot_daily_activity, plot_hours_by_year,
    plot_monthly_heatmap, plot_replayed_episodes, plot_top_artists,
    plot_top_shows, plot_track_popularity
)
from listening.config import load_settings
from listening.exceptions import ListeningHistoryError, NoListeningDataError
from listening.report import build_report_from_settings

logger = logging.getLogger(__name__)

# Set page configuration
st.set_page_config(
    page_title="Spotify - Listening History",
    page_icon="🎵",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Apply custom CSS for better styling
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        color: #1DB954;
        margin-bottom: 1rem;
    }
    .sub-header {
        font-size: 1.5rem;
        color: #1DB954;
        margin-top: 2rem;
    }
    .stat-number {
        font-size: 1.8rem;
        font-weight: bold;
        color: #1DB954;
    }
    footer {
        visibility: hidden;
    }
</style>
""", unsafe_allow_html=True)

# Initialize session state for data persistence between reruns
if "report" not in st.session_state:
    st.session_state.report = None


def load_report():
    """Build the report from the configured history folder"""
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    with st.spinner(f"Loading listening history from {settings.data_dir}..."):
        try:
            report = build_report_from_settings(settings)
        except NoListeningDataError as e:
            logger.warning(f"Nothing to report: {e}")
            st.error(f"No listening data found in {settings.data_dir}: {e}")
            st.error("Make sure your Streaming_History_Audio_*.json files are in the correct location.")
            return None
        except (ListeningHistoryError, ValueError, OSError) as e:
            logger.error(f"Error loading listening history: {e}")
            st.error(f"Error loading listening history from {settings.data_dir}: {e}")
            return None

    st.session_state.report = report
    return report


def show_metric(column, value, label):
    with column:
        st.markdown(f"<div class='stat-number'>{value}</div>", unsafe_allow_html=True)
        st.markdown(label, unsafe_allow_html=True)


def show_table(df, title, columns):
    """Display a table with renamed columns"""
    st.subheader(title)
    if df.empty:
        st.info("Nothing to show here.")
        return
    st.dataframe(df[list(columns)].rename(columns=columns))


def main():
    """Main function for Streamlit app"""
    st.markdown("<h1 class='main-header' style='text-align: center;'>🎵 My Spotify Listening History 🎵</h1>", unsafe_allow_html=True)

    report = st.session_state.report
    if report is None:
        report = load_report()
        if report is None:
            return

    summary = report.summary

    # Key metrics
    st.markdown("<h2 class='sub-header'>📊 Key Metrics</h2>", unsafe_allow_html=True)
    col1, col2, col3, col4 = st.columns(4)
    show_metric(col1, f"{summary['music_hours']:,.0f}", "Hours of Music")
    show_metric(col2, f"{summary['podcast_hours']:,.0f}", "Hours of Podcasts")
    show_metric(col3, summary['distinct_artists'], "Different Artists")
    show_metric(col4, summary['distinct_shows'], "Different Podcasts")
    st.caption(f"From {summary['first_day']} to {summary['last_day']} · "
               f"{summary['track_plays']:,} track plays · {summary['episode_plays']:,} episode plays · "
               f"{report.dropped_events:,} events skipped")

    # Section 1: Hours per year
    st.markdown("---")
    st.header("🗓️ Hours per Year")
    hours_fig = plot_hours_by_year(report.hours_by_year)
    if hours_fig:
        st.plotly_chart(hours_fig)

    # Section 2: Top artists
    st.markdown("---")
    st.header("🎸 Top Artists")
    col1, col2 = st.columns(2)
    with col1:
        recent_chart = plot_top_artists(report.top_artists_recent, "Top Artists (Recent Years)")
        if recent_chart is not None:
            st.altair_chart(recent_chart)
        else:
            st.info("No plays in the recent years.")
    with col2:
        earlier_chart = plot_top_artists(report.top_artists_earlier, "Top Artists (Earlier Years)")
        if earlier_chart is not None:
            st.altair_chart(earlier_chart)
        else:
            st.info("No plays before the recent years.")

    rank_fig = plot_artist_rank_over_time(report.artist_ranks)
    if rank_fig:
        st.plotly_chart(rank_fig)

    # Section 3: Top tracks
    st.markdown("---")
    st.header("🎵 Top Tracks")
    show_table(report.top_tracks, "Most Played Tracks", {
        'track_name': 'Track',
        'artist': 'Artist',
        'play_count': 'Plays',
        'popularity': 'Popularity',
        'explicit': 'Explicit'
    })
    popularity_fig = plot_track_popularity(report.top_tracks)
    if popularity_fig:
        st.plotly_chart(popularity_fig)
    else:
        st.info("Spotify metadata is not available, popularity is not shown.")

    # Section 4: Podcasts
    st.markdown("---")
    st.header("🎙️ Podcasts")
    shows_fig = plot_top_shows(report.top_shows)
    if shows_fig:
        st.plotly_chart(shows_fig)
    else:
        st.info("No podcast listening found.")

    if report.replay_show:
        replay_fig = plot_replayed_episodes(report.replayed_episodes, report.replay_show)
        if replay_fig:
            st.plotly_chart(replay_fig)
        else:
            st.info(f"No episode of {report.replay_show} was played for 15 minutes or more.")

    # Section 5: Daily activity
    st.markdown("---")
    st.header("📈 Daily Activity")
    daily_fig = plot_daily_activity(report.daily)
    if daily_fig:
        st.plotly_chart(daily_fig)
    else:
        st.info("No track plays, so there is no daily calendar to show.")
    heatmap = plot_monthly_heatmap(report.daily['music'])
    if heatmap:
        st.pyplot(heatmap)
        plt.close(heatmap)


if __name__ == "__main__":
    main()
