"""
Chart builders for the listening report.

Each function returns a figure or None when there is nothing to plot.
"""
import altair as alt
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import plotly.express as px
import seaborn as sns

MONTH_LABELS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def plot_hours_by_year(hours_df):
    """Grouped bars of music and podcast hours per year"""
    if hours_df.empty:
        return None

    fig = px.bar(
        hours_df,
        x='year',
        y='hours',
        color='category',
        barmode='group',
        labels={'hours': 'Hours Played', 'year': 'Year', 'category': ''},
        title='Hours Listened per Year',
        color_discrete_map={'music': '#1DB954', 'podcast': '#535353'}
    )
    fig.update_layout(
        xaxis=dict(tickmode='linear', dtick=1),
        plot_bgcolor='rgba(0,0,0,0)',
        height=400
    )
    return fig


def plot_top_artists(artists_df, title):
    """Plot top artists by hours with Altair"""
    if artists_df.empty:
        return None

    n = len(artists_df)
    chart = alt.Chart(artists_df).mark_bar().encode(
        x=alt.X('hours:Q', title='Hours Played'),
        y=alt.Y('artist:N', sort='-x', title=None),
        color=alt.Color('hours:Q', scale=alt.Scale(scheme='greenblue'), legend=None),
        tooltip=['artist', alt.Tooltip('hours:Q', format='.1f')]
    ).properties(
        title=title,
        height=n*30 + 50
    ).interactive()

    return chart


def plot_artist_rank_over_time(ranks_df, max_rank=10):
    """Line chart of yearly rank for artists that reached the top max_rank"""
    if ranks_df.empty:
        return None

    # Follow every artist that made the top list in at least one year
    contenders = ranks_df.loc[ranks_df['rank'] <= max_rank, 'artist'].unique()
    history = ranks_df[ranks_df['artist'].isin(contenders)]
    history = history[history['rank'] <= max_rank]

    fig = px.line(
        history,
        x='year',
        y='rank',
        color='artist',
        markers=True,
        hover_data={'hours_played': ':.1f'},
        labels={'rank': 'Rank', 'year': 'Year', 'artist': 'Artist'},
        title=f'Artist Rank by Year (Top {max_rank})'
    )
    fig.update_layout(
        yaxis=dict(autorange='reversed', tickmode='array', tickvals=np.arange(1, max_rank + 1)),
        xaxis=dict(tickmode='linear', dtick=1),
        plot_bgcolor='rgba(0,0,0,0)',
        height=500
    )
    return fig


def plot_track_popularity(tracks_df):
    """Scatter of play count against Spotify popularity for the top tracks"""
    if tracks_df.empty or tracks_df['popularity'].isna().all():
        return None

    plotted = tracks_df.dropna(subset=['popularity']).assign(
        popularity=lambda x: x['popularity'].astype('float64'),
        explicit=lambda x: x['explicit'].astype('object').map({True: 'Explicit', False: 'Clean'}).fillna('Unknown'),
    )

    fig = px.scatter(
        plotted,
        x='popularity',
        y='play_count',
        color='explicit',
        hover_data=['track_name', 'artist'],
        labels={'popularity': 'Popularity (0-100)', 'play_count': 'Times Played', 'explicit': ''},
        title='Your Most Played Tracks vs. Spotify Popularity'
    )
    fig.update_layout(
        xaxis=dict(range=[0, 100]),
        plot_bgcolor='rgba(0,0,0,0)',
        height=450
    )
    return fig


def plot_top_shows(shows_df):
    """Horizontal bars of podcast hours"""
    if shows_df.empty:
        return None

    fig = px.bar(
        shows_df,
        x='hours',
        y='show_name',
        orientation='h',
        hover_data=['episodes_played'],
        labels={'hours': 'Hours Played', 'show_name': ''},
        color='hours',
        color_continuous_scale='Viridis',
        title='Top Podcasts'
    )
    fig.update_layout(
        yaxis=dict(categoryorder='total ascending'),
        plot_bgcolor='rgba(0,0,0,0)',
        height=len(shows_df)*30 + 120
    )
    return fig


def plot_replayed_episodes(replays_df, show):
    """Bars of distinct replay days per episode"""
    if replays_df.empty:
        return None

    fig = px.bar(
        replays_df,
        x='replays',
        y='episode_name',
        orientation='h',
        text_auto=True,
        labels={'replays': 'Days Played', 'episode_name': ''},
        title=f'Most Replayed Episodes of {show}'
    )
    fig.update_layout(
        yaxis=dict(categoryorder='total ascending'),
        xaxis=dict(tickmode='linear', dtick=1),
        plot_bgcolor='rgba(0,0,0,0)',
        height=len(replays_df)*40 + 120
    )
    return fig


def plot_daily_activity(daily):
    """Daily minutes for music and podcasts on one time axis"""
    frames = [
        frame.assign(category=category)
        for category, frame in daily.items()
        if not frame.empty
    ]
    if not frames:
        return None

    combined = pd.concat(frames, ignore_index=True)
    fig = px.line(
        combined,
        x='date',
        y='total_minutes_played',
        color='category',
        labels={'total_minutes_played': 'Minutes', 'date': '', 'category': ''},
        title='Daily Listening',
        color_discrete_map={'music': '#1DB954', 'podcast': '#535353'}
    )
    fig.update_layout(plot_bgcolor='rgba(0,0,0,0)', height=400)
    return fig


def plot_monthly_heatmap(daily_df):
    """Seaborn heatmap of hours per month and year"""
    if daily_df.empty:
        return None

    dates = pd.to_datetime(daily_df['date'])
    monthly = daily_df.assign(year=dates.dt.year, month=dates.dt.month)
    grid = monthly.pivot_table(
        index='year',
        columns='month',
        values='total_minutes_played',
        aggfunc='sum',
        fill_value=0
    ) / 60
    grid = grid.reindex(columns=range(1, 13))

    fig, ax = plt.subplots(figsize=(12, max(2, len(grid) * 0.6)))
    sns.heatmap(grid, ax=ax, cmap='Greens', annot=True, fmt='.0f', cbar_kws={'label': 'Hours'},
                xticklabels=MONTH_LABELS)
    ax.set_xlabel('')
    ax.set_ylabel('')
    ax.set_title('Hours per Month')
    fig.tight_layout()
    return fig
