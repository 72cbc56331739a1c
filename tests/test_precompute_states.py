import precompute_states


def test_load_progress_retries_cells_without_state(tmp_path):
    path = tmp_path / 'progress.csv'
    path.write_text('lat,lon,state\n40.0,-105.0,Colorado\n30.0,-80.0,\n41.0,-111.0,Utah\n')

    results, processed = precompute_states.load_progress(str(path))

    assert [row['state'] for row in results] == ['Colorado', 'Utah']
    assert processed == {(40.0, -105.0), (41.0, -111.0)}


def test_load_progress_without_temp_file(tmp_path):
    results, processed = precompute_states.load_progress(str(tmp_path / 'missing.csv'))

    assert results == []
    assert processed == set()
